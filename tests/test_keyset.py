import pytest

from quorum_wallet import (
    ConfigurationError,
    DuplicatePublicKeyError,
    EmptyPublicKeyError,
    InvalidPublicKeyError,
    InvalidSignatureError,
    LengthMismatchError,
    MultisigKeySet,
    ThresholdKeySet,
    ThresholdOutOfRangeError,
    WalletMode,
)
from quorum_wallet.curve import G1Point, G2Point
from quorum_wallet.hash import derive_weight, hash_public_key
from quorum_wallet.keyset import derive_verification_point


# ── multisig ────────────────────────────────────────────────────────────

def test_multisig_stores_key_as_is(multisig_keyset, g1_holders):
    expected = G1Point.sum_points(h.public_key for h in g1_holders)
    assert multisig_keyset.aggregated_key == expected
    assert isinstance(multisig_keyset.aggregated_key, G1Point)
    assert multisig_keyset.mode is WalletMode.KEYS_ON_G1


@pytest.mark.parametrize("mode, size", [
    (WalletMode.KEYS_ON_G1, 256),   # a G2-sized blob in G1 mode
    (WalletMode.KEYS_ON_G2, 128),
])
def test_multisig_rejects_wrong_length(mode, size):
    with pytest.raises(InvalidPublicKeyError, match="bytes"):
        MultisigKeySet.create(mode, G1Point.generator().to_bytes()[:1] * size)


def test_multisig_rejects_identity_key():
    with pytest.raises(InvalidPublicKeyError, match="infinity"):
        MultisigKeySet.create(WalletMode.KEYS_ON_G1, b"\x00" * 128)


def test_multisig_rejects_malformed_point():
    data = bytearray(G1Point.generator().to_bytes())
    data[-1] ^= 0x01
    with pytest.raises(InvalidPublicKeyError):
        MultisigKeySet.create(WalletMode.KEYS_ON_G1, bytes(data))


def test_unknown_mode_is_rejected():
    with pytest.raises(ConfigurationError):
        MultisigKeySet.create(WalletMode.UNKNOWN, G1Point.generator().to_bytes())


# ── threshold: configuration errors ─────────────────────────────────────

def test_threshold_rejects_empty_key_list():
    with pytest.raises(EmptyPublicKeyError):
        ThresholdKeySet.create(WalletMode.KEYS_ON_G2, [], [], 1)


def test_threshold_rejects_length_mismatch(g2_group):
    with pytest.raises(LengthMismatchError):
        ThresholdKeySet.create(
            WalletMode.KEYS_ON_G2, g2_group.public_keys,
            g2_group.member_id_bytes[:2], 2,
        )


@pytest.mark.parametrize("threshold", [0, 4, -1])
def test_threshold_out_of_range(g2_group, threshold):
    with pytest.raises(ThresholdOutOfRangeError):
        ThresholdKeySet.create(
            WalletMode.KEYS_ON_G2, g2_group.public_keys,
            g2_group.member_id_bytes, threshold,
        )


def test_threshold_rejects_duplicate_key(g2_group):
    keys = g2_group.public_keys
    with pytest.raises(DuplicatePublicKeyError):
        ThresholdKeySet.create(
            WalletMode.KEYS_ON_G2, [keys[0], keys[0], keys[2]],
            g2_group.member_id_bytes, 2,
        )


def test_threshold_rejects_wrong_key_length(g2_group):
    keys = list(g2_group.public_keys)
    keys[1] = keys[1][:128]
    with pytest.raises(InvalidPublicKeyError):
        ThresholdKeySet.create(
            WalletMode.KEYS_ON_G2, keys, g2_group.member_id_bytes, 2,
        )


def test_threshold_rejects_wrong_member_id_length(g2_group):
    ids = list(g2_group.member_id_bytes)
    ids[0] = ids[0] + b"\x00"
    with pytest.raises(InvalidSignatureError, match="member id"):
        ThresholdKeySet.create(
            WalletMode.KEYS_ON_G2, g2_group.public_keys, ids, 2,
        )


def test_threshold_rejects_swapped_member_ids(g2_group):
    ids = list(g2_group.member_id_bytes)
    ids[0], ids[1] = ids[1], ids[0]
    with pytest.raises(InvalidSignatureError, match="Member ID does not match public key"):
        ThresholdKeySet.create(
            WalletMode.KEYS_ON_G2, g2_group.public_keys, ids, 2,
        )


# ── threshold: registered state ─────────────────────────────────────────

def test_threshold_records(threshold_keyset, g2_group):
    assert threshold_keyset.threshold == 2
    assert threshold_keyset.num_members == 3
    keys = g2_group.public_keys
    for raw, holder, mk in zip(keys, g2_group.holders, g2_group.member_ids):
        record = threshold_keyset.members[hash_public_key(raw)]
        assert record.weight == derive_weight(raw, keys)
        assert record.public_key == holder.public_key
        assert record.member_id_point == mk
        assert record.verification_point == derive_verification_point(
            WalletMode.KEYS_ON_G2, record.weight, threshold_keyset.weight_domain,
        )
        assert isinstance(record.verification_point, G1Point)
        assert isinstance(record.public_key, G2Point)
        assert isinstance(record.member_id_point, G1Point)
    assert threshold_keyset.member(keys[0]) is not None
    assert not threshold_keyset.is_member(b"\x00" * 256)


def test_threshold_aggregated_key_is_weighted_sum(threshold_keyset, g2_group):
    keys = g2_group.public_keys
    expected = G2Point.multi_scalar(
        [derive_weight(pk, keys) for pk in keys],
        [h.public_key for h in g2_group.holders],
    )
    assert threshold_keyset.aggregated_key == expected


def test_threshold_records_are_read_only(threshold_keyset):
    with pytest.raises(TypeError):
        threshold_keyset.members[b"x"] = None
