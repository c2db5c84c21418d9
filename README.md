# nftkit

nftkit builds and reads the netlink attribute payloads that describe
nftables rule expressions. It turns Python objects such as `Meta`, `Cmp`,
`Payload`, `NAT` or `Verdict` into the bytes the kernel expects, and parses
those bytes back into objects.

It uses only the standard library.

## Installation

From a checkout of the project:

```
pip install .
```

## Encoding expressions

Every expression is a dataclass deriving from `nftkit.expr.base.Expression`.

```python
from nftkit.expr.base import marshal
from nftkit.expr.meta import Meta, MetaKey, Cmp, CmpOp
from nftkit.expr.immediate import Verdict, VerdictKind

family = 2  # IPv4

rule = [
    Meta(key=MetaKey.IIFNAME, register=1),
    Cmp(op=CmpOp.EQ, register=1, data=b"eth0\x00"),
    Verdict(kind=VerdictKind.ACCEPT),
]

encoded = [marshal(family, expr) for expr in rule]
```

`marshal` (or the method `Expression.marshal`) produces the whole
expression: its name attribute plus its nested data. `marshal_data` produces
only the expression-specific attributes.

The expression types live in these modules of `nftkit.expr`:

* `meta` – `Meta`, `Masq`, `Cmp`, `Notrack`
* `immediate` – `Immediate`, `Verdict`
* `bitwise` – `Bitwise`, `Byteorder`
* `objref` – `Objref`, `Rt`
* `ct` – `Ct`, `CtHelper`, `CtExpect`, `CtTimeout`
* `counter` – `Counter`, `Connlimit`, `Quota`, `Limit`
* `nat` – `NAT`, `Redir`, `TProxy`
* `payload` – `Payload`, `Exthdr`, `Range`
* `lookup` – `Lookup`
* `log` – `Log`, `Queue`
* `reject` – `Reject`, `Dup`, `Fib`
* `hashing` – `Hash`, `Numgen`
* `sockets` – `Socket`, `SynProxy`
* `xtables` – `Match`, `Target`
* `secmark` – `SecMark`
* `flowoffload` – `FlowOffload`
* `registry` – `Dynset`, and the decoding helpers below

Enumerated fields use `IntEnum` types such as `MetaKey`, `CmpOp`, `CtKey`,
`NATType` or `VerdictKind`; a value the enum does not know is kept as a
plain `int`.

## Decoding expressions

```python
from nftkit.expr.registry import parse_expression

expr = parse_expression(family, encoded[0])
assert expr == Meta(key=MetaKey.IIFNAME, register=1)
```

`parse_expression` reads the expression name and picks the class through
`expr_type_from_name`. An immediate that writes nothing into the verdict
register is returned as a `Verdict`. Names without a registered class give
`None`; `Fib`, `Numgen`, `Socket`, `Rt`, `Dup`, `TProxy` and `Byteorder`
are among these, so decode them directly. `parse_expression_list` decodes a
nested list of expressions and skips unsupported ones.

To decode a known type directly, call `unmarshal(family, data, ExprType)`
from `nftkit.expr.base`, or the class method
`ExprType.unmarshal(family, data)`, with the expression's data attributes.

Some decoders raise `ValueError` on bad input, for instance `Limit` for an
unknown unit or type, and `Numgen.marshal_data` for an unsupported type.

## Low-level helpers

* `nftkit.nlattr` – `encode` and `decode` netlink attributes. `Attribute`
  has big-endian accessors (`uint8`, `uint16`, `uint32`, `uint64`),
  `string` and `nested`; malformed input raises `AttributeDecodeError`.
* `nftkit.binaryutil` – `ByteOrder` with `BIG_ENDIAN` and `NATIVE_ENDIAN`
  instances, plus `put_int32`, `int32`, `put_string` and `string`.
* `nftkit.alignedbuff` – `AlignedBuff` writes and reads values with the
  platform's native C alignment and byte order, as xtables match and target
  payloads need. `payload()` returns the written bytes padded to uint64
  alignment; reading past the end raises `AlignedBuffEOF`.
* `nftkit.compat_policy` – `get_compat_policy` returns the `CompatPolicy`
  (layer-4 protocol) that the xtables `Match` and `Target` expressions of a
  rule imply, or `None`, and raises `CompatPolicyConflict` when two of them
  disagree.

## What nftkit does not do

nftkit deals only in bytes. It opens no netlink sockets and talks to no
kernel: it does not add, list or delete tables, chains, rules, sets or
objects, and does not batch or send messages. Pair it with whatever netlink
transport you use.

The `info` of `Match` and `Target` is kept as raw bytes; nftkit does not
interpret the payloads of individual xtables extensions.

## Running the tests

```
pip install .[test]
pytest
```