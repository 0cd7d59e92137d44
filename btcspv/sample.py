"""
Sample Witness

A testnet deposit of 1000 sat to the default bridge address, carrying the
recipient 0xa86Ed347B8D1043533fe30c07Fc47f3E3b849a42 in its OP_RETURN,
followed by five confirming headers. The same transaction also serves as
a burn payout when the burner address is the bridge address.

Used by the CLI when no --input-json is given.
"""

from btcspv.constants import DEFAULT_BRIDGE_ADDRESS

SAMPLE_RAW_TX = (
    "010000000001015564819f67c2803761c4370d9a5fd950c8e6ff34d68ebacc47fd21413aa833ea"
    "0100000000ffffffff03e8030000000000001600141240e21b1e7877f77bfe66cc59eefb02d17a"
    "0a3f00000000000000002c6a2a30786138364564333437423844313034333533336665333063"
    "3037466334376633453362383439613432"
    "9b020000000000001600144cf2f041e4acc16071306ab41414cab4c76cfd50"
    "02483045022100bf43ff7d1ae782368550cb14cc916d389277a0f103643fa352ea76ba2ccd7315"
    "02205028ba84f39deb9ff71db91153c6f71e7f9f5f6df9258c29bb49ec0461785b75012103292a"
    "330133c26afde92f10737cc3e38ebcf7403b4e2232c4b65821c1aa55cdf800000000"
)

SAMPLE_RECIPIENT = "0xa86Ed347B8D1043533fe30c07Fc47f3E3b849a42"

_BITS = 437256176  # 0x1a0ffff0

SAMPLE_BLOCKS = [
    {
        "block_hash": "00000000000002ee8b7a2baff6fc9366166d75b97301a68b0eceb3bf60f38d8f",
        "version": 633618432,
        "parent_hash": "0000000000000bf53edcfa982a0cbcaab1abf62660ec3ec67149df036891b32b",
        "merkle_root": "214101dabc8c2b1e02999995163f31b187351c8ac1dad611e2660c2c4cae5ac6",
        "timestamp": 1744638928,
        "difficulty": _BITS,
        "nonce": 4137494058,
    },
    {
        "block_hash": "00000000000003fd04b9cb97cc0f1ce28a4588d965c595dfb4dbaf9bfd8b2a82",
        "version": 770375680,
        "parent_hash": "00000000000002ee8b7a2baff6fc9366166d75b97301a68b0eceb3bf60f38d8f",
        "merkle_root": "b4ce4f3646fd93a8ffed7711840a09039722919c45ff1beb029d5f3027c32858",
        "timestamp": 1744638928,
        "difficulty": _BITS,
        "nonce": 2932452395,
    },
    {
        "block_hash": "0000000000000764853fd899f37e85d2765a1ec763dfd8bf2a1e739a9cad370c",
        "version": 710811648,
        "parent_hash": "00000000000003fd04b9cb97cc0f1ce28a4588d965c595dfb4dbaf9bfd8b2a82",
        "merkle_root": "1d065531f64d5662ba174f7533bddd96632d4e530ed9df2b3d1470336f5c9daa",
        "timestamp": 1744638929,
        "difficulty": _BITS,
        "nonce": 2559894718,
    },
    {
        "block_hash": "0000000000000ef1e4b025cfb3cb6ad42482deaf8551ea2d158c23189483723a",
        "version": 565084160,
        "parent_hash": "0000000000000764853fd899f37e85d2765a1ec763dfd8bf2a1e739a9cad370c",
        "merkle_root": "e4781238e680b8712b32696569a8f7f8a7964612cccb1cc4564c252ba0c545cf",
        "timestamp": 1744638929,
        "difficulty": _BITS,
        "nonce": 2621199785,
    },
    {
        "block_hash": "00000000000003d773169c1c0dab0a2be623b8b2357b2029d889a3078328ee5f",
        "version": 565624832,
        "parent_hash": "0000000000000ef1e4b025cfb3cb6ad42482deaf8551ea2d158c23189483723a",
        "merkle_root": "e4b951c8dc1318c92de34759d26098c47c0b7562b05949fc741ee80b44a3d665",
        "timestamp": 1744638929,
        "difficulty": _BITS,
        "nonce": 2556017316,
    },
    {
        "block_hash": "0000000000000d76abee84857450cfec57f49c9a2bc0e5ecbf018dc72bc8bbf7",
        "version": 585113600,
        "parent_hash": "00000000000003d773169c1c0dab0a2be623b8b2357b2029d889a3078328ee5f",
        "merkle_root": "3eae91ae2faac30f4694b548caedab64b41c2147e04e5111f0f5b43de4e39904",
        "timestamp": 1744638929,
        "difficulty": _BITS,
        "nonce": 3028696670,
    },
]


def sample_witness() -> dict:
    """Fresh copy of the sample witness in canonical form."""
    return {
        "merkle_proof": {
            "siblings": ["cc4522617a92f7b27416f3cedad721949df7aec91d6e87f23ef2895c760e6eee"],
            "pos": 1,
        },
        "chains": {"blocks": [dict(block) for block in SAMPLE_BLOCKS]},
        "bit_tx_info": {"raw_tx_hex": SAMPLE_RAW_TX},
        "burner_btc_address": DEFAULT_BRIDGE_ADDRESS,
    }
