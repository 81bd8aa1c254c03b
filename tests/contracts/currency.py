"""
NATIVE CURRENCY (test chain)

Minimal balances/allowances contract with the native currency's
transfer / approve / transfer_from interface.
"""

# address -> amount, (owner, spender) -> allowance
balances = Hash(default_value=0)

metadata = Hash()

@construct
def seed():
    metadata['operator'] = ctx.caller
    balances[ctx.caller] = 1000000000

@export
def balance_of(address: str):
    return balances[address]

@export
def transfer(amount: float, to: str):
    assert amount > 0, 'Cannot send negative balances!'
    assert balances[ctx.caller] >= amount, 'Not enough coins to send!'

    balances[ctx.caller] -= amount
    balances[to] += amount

@export
def approve(amount: float, to: str):
    assert amount > 0, 'Cannot approve negative balances!'
    balances[ctx.caller, to] = amount

@export
def transfer_from(amount: float, to: str, main_account: str):
    assert amount > 0, 'Cannot send negative balances!'
    assert balances[main_account, ctx.caller] >= amount, 'Not enough coins approved to send!'
    assert balances[main_account] >= amount, 'Not enough coins to send!'

    balances[main_account, ctx.caller] -= amount
    balances[main_account] -= amount
    balances[to] += amount
