"""
FUTURIFY: CONFIDENTIAL PREDICTION MARKETS

Balances, wagers and per-option totals are encrypted handles held by con_fhe.
No code path branches on a confidential value:
  - an invalid bet is applied with its amount masked to zero
  - option totals always have 4 slots, only the public option_count
    decides which slots receive work

Decrypt access is an append-only list of principals per handle.
Totals become public only when the creator ends the prediction.
"""

import con_fhe
import currency

# -----------------------------------------------------------------------------
# Parameters
# -----------------------------------------------------------------------------

MIN_OPTIONS = 2
MAX_OPTIONS = 4
UINT64_LIMIT = 2 ** 64

PUBLIC = '*'  # public decryption tier

# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------

# account -> euint64 handle
balances = Hash()

# id -> {'id', 'title', 'options', 'option_count', 'creator', 'created_at', 'is_open'}
predictions = Hash()

# id -> [euint64 handle] * MAX_OPTIONS
totals = Hash()

# (id, account) -> {'choice': euint8 handle, 'amount': euint64 handle}
wagers = Hash()

# handle -> [principal, ...]
access = Hash()

# contract metadata / config
metadata = Hash()

prediction_count = Variable()

# Events
CoinsPurchasedEvent = LogEvent('CoinsPurchased', {
    'buyer': {'type': str, 'idx': True},
    'amount': {'type': int},
    'units': {'type': int}
})

PredictionCreatedEvent = LogEvent('PredictionCreated', {
    'prediction_id': {'type': int, 'idx': True},
    'creator': {'type': str, 'idx': True},
    'option_count': {'type': int}
})

BetPlacedEvent = LogEvent('BetPlaced', {
    'prediction_id': {'type': int, 'idx': True},
    'bettor': {'type': str, 'idx': True}
})

PredictionEndedEvent = LogEvent('PredictionEnded', {
    'prediction_id': {'type': int, 'idx': True},
    'creator': {'type': str, 'idx': True}
})

DecryptGrantedEvent = LogEvent('DecryptGranted', {
    'handle': {'type': str, 'idx': True},
    'principal': {'type': str, 'idx': True}
})

# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------

@construct
def seed():
    metadata['name'] = "Futurify"
    metadata['operator'] = ctx.caller

    # 1 purchased coin mints this many encrypted units
    metadata['units_per_coin'] = 1000000
    metadata['max_options'] = MAX_OPTIONS

    prediction_count.set(0)

# -----------------------------------------------------------------------------
# Views
# -----------------------------------------------------------------------------

@export
def get_metadata():
    return {
        'name': metadata['name'],
        'operator': metadata['operator'],
        'units_per_coin': metadata['units_per_coin'],
        'max_options': metadata['max_options']
    }

@export
def change_metadata(key: str, value: Any):
    assert ctx.caller == metadata['operator'], 'AuthorizationError: only operator can set metadata'
    assert key not in ('operator', 'units_per_coin', 'max_options'), 'ValidationError: ' + key + ' is immutable'
    metadata[key] = value

@export
def get_balance(account: str):
    return balances[account]

@export
def get_prediction_count():
    return prediction_count.get()

@export
def get_prediction(prediction_id: int):
    record = load_prediction(prediction_id)
    return {
        'id': record['id'],
        'title': record['title'],
        'options': record['options'],
        'option_count': record['option_count'],
        'is_open': record['is_open'],
        'created_at': record['created_at'],
        'creator': record['creator']
    }

@export
def get_prediction_totals(prediction_id: int):
    load_prediction(prediction_id)
    return totals[prediction_id]

@export
def get_user_choice(prediction_id: int, account: str):
    load_prediction(prediction_id)
    wager = wagers[prediction_id, account]
    return wager['choice'] if wager else None

@export
def get_user_bet(prediction_id: int, account: str):
    load_prediction(prediction_id)
    wager = wagers[prediction_id, account]
    return wager['amount'] if wager else None

@export
def get_access(handle: str):
    return access[handle] or []

@export
def can_decrypt(handle: str, principal: str):
    principals = access[handle] or []
    return principal in principals or PUBLIC in principals

# -----------------------------------------------------------------------------
# Permission manager
# -----------------------------------------------------------------------------

def grant(handle, principal):
    principals = access[handle] or []
    if principal in principals:
        return
    principals.append(principal)
    access[handle] = principals

    DecryptGrantedEvent({'handle': handle, 'principal': principal})

def grant_service_decrypt(handle):
    grant(handle, ctx.this)

def grant_account_decrypt(handle, account):
    grant(handle, account)

def grant_public_decrypt(handle):
    # Irreversible: no code path removes a principal
    grant(handle, PUBLIC)

# -----------------------------------------------------------------------------
# Ledger
# -----------------------------------------------------------------------------

def encrypted_zero(kind):
    return con_fhe.trivial_encrypt(value=0, kind=kind)

def current_balance(account):
    handle = balances[account]
    if handle is None:
        handle = encrypted_zero('euint64')
        balances[account] = handle
    return handle

def credit(account, amount):
    updated = con_fhe.add(a=current_balance(account), b=amount)
    balances[account] = updated
    return updated

def debit_masked(account, requested, allowed):
    spend = con_fhe.select(condition=allowed, a=requested, b=encrypted_zero('euint64'))
    balances[account] = con_fhe.sub(a=current_balance(account), b=spend)
    return spend

@export
def buy_coins(amount: int):
    """
    Pays `amount` whole coins of the native currency (approved beforehand to
    this contract) and mints amount * units_per_coin encrypted units.
    An existing balance plus the mint wraps past 2**64 without notice; with
    paid-for units that needs more currency than exists.
    """
    assert isinstance(amount, int) and amount > 0, 'ValidationError: purchase amount must be positive'

    units = amount * metadata['units_per_coin']
    assert units < UINT64_LIMIT, 'ValidationError: purchase exceeds 64-bit balance range'

    # Payment first: a missing allowance or balance aborts before any write here
    currency.transfer_from(amount=amount, to=ctx.this, main_account=ctx.caller)

    minted = con_fhe.trivial_encrypt(value=units, kind='euint64')
    balance = credit(ctx.caller, minted)

    grant_service_decrypt(balance)
    grant_account_decrypt(balance, ctx.caller)

    CoinsPurchasedEvent({'buyer': ctx.caller, 'amount': amount, 'units': units})

# -----------------------------------------------------------------------------
# Prediction registry
# -----------------------------------------------------------------------------

def load_prediction(prediction_id):
    record = predictions[prediction_id]
    assert record is not None and record['option_count'] >= MIN_OPTIONS, \
        'NotFoundError: prediction ' + str(prediction_id) + ' does not exist'
    return record

@export
def create_prediction(title: str, options: list):
    assert isinstance(title, str), 'ValidationError: title must be a string'
    assert isinstance(options, list), 'ValidationError: options must be a list'
    assert MIN_OPTIONS <= len(options) <= MAX_OPTIONS, 'ValidationError: options must have between 2 and 4 entries'
    for option in options:
        assert isinstance(option, str), 'ValidationError: options must be strings'

    prediction_id = prediction_count.get()
    prediction_count.set(prediction_id + 1)

    slots = []
    for slot in range(MAX_OPTIONS):
        handle = encrypted_zero('euint64')
        grant_service_decrypt(handle)
        grant_account_decrypt(handle, ctx.caller)
        slots.append(handle)

    predictions[prediction_id] = {
        'id': prediction_id,
        'title': title,
        'options': options,
        'option_count': len(options),
        'creator': ctx.caller,
        'created_at': now,
        'is_open': True
    }
    totals[prediction_id] = slots

    PredictionCreatedEvent({
        'prediction_id': prediction_id,
        'creator': ctx.caller,
        'option_count': len(options)
    })

    return prediction_id

@export
def end_prediction(prediction_id: int):
    record = load_prediction(prediction_id)
    assert ctx.caller == record['creator'], 'AuthorizationError: only the creator can end a prediction'
    assert record['is_open'], 'StateError: prediction already ended'

    record['is_open'] = False
    predictions[prediction_id] = record

    slots = totals[prediction_id]
    for slot in range(record['option_count']):
        grant_public_decrypt(slots[slot])

    PredictionEndedEvent({'prediction_id': prediction_id, 'creator': ctx.caller})

# -----------------------------------------------------------------------------
# Bet processor
# -----------------------------------------------------------------------------

@export
def place_bet(prediction_id: int,
              encrypted_choice: str,
              encrypted_amount: str,
              input_proof: str):
    record = load_prediction(prediction_id)
    assert record['is_open'], 'StateError: prediction has ended'

    bettor = ctx.caller
    option_count = record['option_count']

    converted = con_fhe.from_external(
        handles=[encrypted_choice, encrypted_amount],
        kinds=['euint8', 'euint64'],
        proof=input_proof,
        account=bettor
    )
    choice = converted[0]
    amount = converted[1]

    # Homomorphic validity: choice < option_count AND amount <= balance
    option_limit = con_fhe.trivial_encrypt(value=option_count, kind='euint8')
    choice_valid = con_fhe.lt(a=choice, b=option_limit)
    balance_ok = con_fhe.le(a=amount, b=current_balance(bettor))
    allowed = con_fhe.logical_and(a=choice_valid, b=balance_ok)

    spend = debit_masked(bettor, amount, allowed)
    stored_choice = con_fhe.select(condition=allowed, a=choice, b=encrypted_zero('euint8'))

    # Latest wager wins
    wagers[prediction_id, bettor] = {'choice': stored_choice, 'amount': spend}

    slots = totals[prediction_id]
    for slot in range(MAX_OPTIONS):
        if slot < option_count:
            option_handle = con_fhe.trivial_encrypt(value=slot, kind='euint8')
            is_this_option = con_fhe.eq(a=stored_choice, b=option_handle)
            contribution = con_fhe.select(condition=is_this_option, a=spend, b=encrypted_zero('euint64'))
            slots[slot] = con_fhe.add(a=slots[slot], b=contribution)

            grant_service_decrypt(slots[slot])
            grant_account_decrypt(slots[slot], record['creator'])
    totals[prediction_id] = slots

    balance = balances[bettor]
    grant_service_decrypt(balance)
    grant_account_decrypt(balance, bettor)

    grant_service_decrypt(stored_choice)
    grant_account_decrypt(stored_choice, bettor)
    grant_service_decrypt(spend)
    grant_account_decrypt(spend, bettor)

    BetPlacedEvent({'prediction_id': prediction_id, 'bettor': bettor})
