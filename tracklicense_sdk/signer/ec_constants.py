"""
Constants for elliptic curve cryptography.
"""
# SECP256K1 constants
# Order of the SECP256K1 elliptic curve (N value)
SECP256K1_N = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

# Field prime of the SECP256K1 curve (P value)
SECP256K1_P = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEFFFFFC2F

# Valid private keys are scalars in [1, N-1]
SECP256K1_MIN = 1
SECP256K1_MAX = SECP256K1_N - 1

# Sizes at the byte level, for BIP-340 x-only keys and signatures
PRIVATE_KEY_SIZE = 32
PUBLIC_KEY_SIZE = 32
SIGNATURE_SIZE = 64
AUX_RAND_SIZE = 32
