"""nftables rule expression types and their netlink encoding."""