import pytest

from nftkit.expr.base import NFTA_EXPR_DATA
from nftkit.expr.hashing import (
    NFTA_HASH_SEED,
    NFT_NG_INCREMENTAL,
    NFT_NG_RANDOM,
    Hash,
    HashType,
    Numgen,
)
from nftkit.nlattr import decode


def _data(expr):
    for attr in decode(expr.marshal(0)):
        if attr.kind == NFTA_EXPR_DATA:
            return attr.data
    raise AssertionError("no expression data")


@pytest.mark.parametrize(
    "h",
    [
        Hash(source_register=1, dest_register=2, length=4, modulus=10, offset=5),
        Hash(
            source_register=1,
            dest_register=1,
            length=16,
            modulus=3,
            seed=0xDEADBEEF,
            type=HashType.SYM,
        ),
    ],
)
def test_hash_round_trip(h):
    assert Hash.unmarshal(0, _data(h)) == h


def test_hash_seed_omitted_when_zero():
    kinds = [a.kind for a in decode(Hash(modulus=2).marshal_data(0))]
    assert NFTA_HASH_SEED not in kinds
    assert len(kinds) == 6


def test_hash_expression_name():
    assert decode(Hash().marshal(0))[0].data == b"hash\x00"


@pytest.mark.parametrize("ng_type", [NFT_NG_INCREMENTAL, NFT_NG_RANDOM])
def test_numgen_round_trip(ng_type):
    ng = Numgen(register=1, modulus=4, type=ng_type, offset=2)
    assert Numgen.unmarshal(0, _data(ng)) == ng


def test_numgen_rejects_unknown_type():
    with pytest.raises(ValueError, match="unsupported numgen type"):
        Numgen(register=1, modulus=4, type=7).marshal_data(0)


def test_numgen_expression_name():
    assert decode(Numgen().marshal(0))[0].data == b"numgen\x00"