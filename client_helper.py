# ---- Chain-constant parameters (mirror contracts) ----

PREDICTION_CONTRACT = 'con_futurify'

PUBLIC_PRINCIPAL = '*'
UNITS_PER_COIN = 1_000_000
MAX_OPTIONS = 4

UINT8_LIMIT = 2 ** 8
UINT64_LIMIT = 2 ** 64


class DecryptionDenied(PermissionError):
    pass


def coins_to_units(coins: int) -> int:
    if not isinstance(coins, int) or coins <= 0:
        raise ValueError("Coin amount must be a positive integer")
    return coins * UNITS_PER_COIN

def units_to_coins(units: int) -> float:
    return units / UNITS_PER_COIN

# ---- High-level builders -----------------------------------------------------

def build_bet_input(choice: int, amount: int):
    """
    Returns the plaintext bundle for con_fhe.register_input():
        (values, kinds)
    Checks only what the wallet can see. An out-of-range choice or an amount
    above the balance is still accepted on-chain, it is just masked to zero.
    """
    if not isinstance(choice, int) or choice < 0 or choice >= MAX_OPTIONS:
        raise ValueError("Choice must be between 0 and 3")
    if not isinstance(amount, int) or amount <= 0:
        raise ValueError("Amount must be a positive integer")
    if amount >= UINT64_LIMIT:
        raise ValueError("Amount does not fit in 64 bits")

    return {
        'values': [choice, amount],
        'kinds': ['euint8', 'euint64']
    }

def encrypt_bet(fhe, account: str, choice: int, amount: int,
                contract_name: str = PREDICTION_CONTRACT):
    """
    Registers an encrypted (choice, amount) bundle for `account` and returns
    kwargs for contract.place_bet() minus prediction_id:
        (encrypted_choice, encrypted_amount, input_proof)
    """
    plan = build_bet_input(choice, amount)
    bundle = fhe.register_input(
        contract=contract_name,
        values=plan['values'],
        kinds=plan['kinds'],
        signer=account,
    )
    return {
        'encrypted_choice': bundle['handles'][0],
        'encrypted_amount': bundle['handles'][1],
        'input_proof': bundle['proof']
    }

# ---- Decryption gateway ------------------------------------------------------

class DecryptionGateway:
    """
    Development relayer. Serves cleartexts from the mock coprocessor, but only
    for grants recorded by the prediction contract's permission manager.

    A wager that decrypts to (choice 0, amount 0) is either a zero bet on
    option 0 or a bet that was masked out; the two are indistinguishable.
    """
    def __init__(self, fhe, ledger, service: str = PREDICTION_CONTRACT):
        self.fhe = fhe
        self.ledger = ledger
        self.service = service

    def principals(self, handle: str):
        return self.ledger.access[handle] or []

    def user_decrypt(self, handle: str, account: str) -> int:
        # Account and issuing contract must both hold a grant
        granted = self.principals(handle)
        public = PUBLIC_PRINCIPAL in granted
        if not public and (account not in granted or self.service not in granted):
            raise DecryptionDenied(f"{account} may not decrypt {handle}")
        return self.cleartext(handle)

    def public_decrypt(self, handle: str) -> int:
        if PUBLIC_PRINCIPAL not in self.principals(handle):
            raise DecryptionDenied(f"{handle} is not publicly decryptable")
        return self.cleartext(handle)

    def cleartext(self, handle: str) -> int:
        if handle is None:
            raise ValueError("No ciphertext handle given")
        entry = self.fhe.ciphertexts[handle]
        if entry is None:
            raise ValueError(f"Unknown ciphertext handle {handle}")
        return entry['value']

    def decrypt_totals(self, prediction_id: int, account: str = None):
        """
        Decrypts the meaningful total slots of a prediction, publicly when
        no account is given.
        """
        prediction = self.ledger.get_prediction(prediction_id=prediction_id)
        handles = self.ledger.get_prediction_totals(prediction_id=prediction_id)
        handles = handles[:prediction['option_count']]
        if account is None:
            return [self.public_decrypt(h) for h in handles]
        return [self.user_decrypt(h, account) for h in handles]
