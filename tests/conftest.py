import pytest

from quorum_wallet import (
    GovernanceWallet,
    KeyHolder,
    MultisigKeySet,
    Operation,
    ThresholdGroup,
    ThresholdKeySet,
    WalletMode,
    aggregate_public_keys,
)

T0 = 1_700_000_000
TARGET = bytes.fromhex("5fbdb2315678afecb367f032d93f642f64180aa3")
PAYLOAD = bytes.fromhex("a9059cbb") + b"\x00" * 64


class FakeClock:
    def __init__(self, now: int = T0) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def set(self, now: int) -> None:
        self.now = now


class RecordingDispatcher:
    """Records every call; returns ``result`` (or raises ``error``)."""

    def __init__(self, result: bool = True, error: Exception = None) -> None:
        self.result = result
        self.error = error
        self.calls = []
        self.hook = None

    def __call__(self, target, value, payload, gas_limit):
        self.calls.append((target, value, payload, gas_limit))
        if self.hook is not None:
            self.hook()
        if self.error is not None:
            raise self.error
        return self.result


def make_operation(nonce, *, effective=T0, lifetime=3600, **overrides):
    fields = dict(
        target=TARGET,
        value=10**18,
        effective_time=effective,
        expiration_time=effective + lifetime,
        gas_limit=100_000,
        nonce=nonce,
        payload=PAYLOAD,
    )
    fields.update(overrides)
    return Operation(**fields).with_check_code()


# ── key material (expensive, built once) ────────────────────────────────

@pytest.fixture(scope="session")
def g1_holders():
    return [KeyHolder(WalletMode.KEYS_ON_G1, s) for s in (1001, 2002, 3003)]


@pytest.fixture(scope="session")
def multisig_keyset(g1_holders):
    apk = aggregate_public_keys(
        WalletMode.KEYS_ON_G1, [h.public_key_bytes for h in g1_holders],
    )
    return MultisigKeySet.create(WalletMode.KEYS_ON_G1, apk)


@pytest.fixture(scope="session")
def g2_group():
    holders = [KeyHolder(WalletMode.KEYS_ON_G2, s) for s in (11, 22, 33)]
    return ThresholdGroup.setup(WalletMode.KEYS_ON_G2, 3, 2, holders=holders)


@pytest.fixture(scope="session")
def threshold_keyset(g2_group):
    return ThresholdKeySet.create(
        WalletMode.KEYS_ON_G2,
        g2_group.public_keys,
        g2_group.member_id_bytes,
        g2_group.threshold,
    )


# ── per-test state ──────────────────────────────────────────────────────

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def multisig_wallet(multisig_keyset, dispatcher, clock):
    return GovernanceWallet(multisig_keyset, dispatcher, clock=clock)


@pytest.fixture
def threshold_wallet(threshold_keyset, dispatcher, clock):
    return GovernanceWallet(threshold_keyset, dispatcher, clock=clock)
