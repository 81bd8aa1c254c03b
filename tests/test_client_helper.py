import pytest


def test_coins_to_units(helper_module):
    assert helper_module.coins_to_units(1) == 1_000_000
    assert helper_module.coins_to_units(7) == 7_000_000
    assert helper_module.units_to_coins(999_500) == 0.9995


@pytest.mark.parametrize("coins", [0, -1, 1.5])
def test_coins_to_units_rejects_bad_amounts(helper_module, coins):
    with pytest.raises(ValueError):
        helper_module.coins_to_units(coins)


def test_build_bet_input_shapes_bundle(helper_module):
    plan = helper_module.build_bet_input(choice=2, amount=500)
    assert plan["values"] == [2, 500]
    assert plan["kinds"] == ["euint8", "euint64"]


@pytest.mark.parametrize(
    "choice, amount",
    [(-1, 10), (4, 10), (0, 0), (0, -3), (0, 2 ** 64)],
)
def test_build_bet_input_rejects_malformed_input(helper_module, choice, amount):
    with pytest.raises(ValueError):
        helper_module.build_bet_input(choice=choice, amount=amount)


def test_encrypt_bet_returns_place_bet_kwargs(helper_module, fhe):
    inputs = helper_module.encrypt_bet(fhe, "alice", 1, 500)

    assert set(inputs) == {"encrypted_choice", "encrypted_amount", "input_proof"}
    proof = fhe.input_proofs[inputs["input_proof"]]
    assert proof["account"] == "alice"
    assert proof["contract"] == helper_module.PREDICTION_CONTRACT
    assert proof["handles"] == [inputs["encrypted_choice"], inputs["encrypted_amount"]]


def test_gateway_rejects_unknown_handle(gateway):
    with pytest.raises(ValueError):
        gateway.cleartext("ab" * 32)


def test_gateway_requires_service_grant(helper_module, fhe, contract):
    # Handle never granted by the prediction contract
    handle = fhe.trivial_encrypt(value=9, kind="euint64")
    gateway = helper_module.DecryptionGateway(fhe, contract)

    with pytest.raises(helper_module.DecryptionDenied):
        gateway.user_decrypt(handle, "operator")
    assert isinstance(helper_module.DecryptionDenied("x"), PermissionError)
