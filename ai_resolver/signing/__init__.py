"""EIP-712 proposal signing and evidence hashing."""
