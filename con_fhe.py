"""
MOCK FHE COPROCESSOR

Handles are opaque sha3 references to typed encrypted scalars.
Callers only ever hold handles; every operation returns a fresh handle.

Development stand-in only: cleartexts are kept in contract state so a
gateway can serve decryptions. Kinds follow the usual FHE integer types:
  - ebool   (1 bit)
  - euint8  (8 bit)
  - euint64 (64 bit)
Arithmetic wraps modulo 2**bits like the on-chain library it replaces.
"""

# -----------------------------------------------------------------------------
# Parameters & Helpers
# -----------------------------------------------------------------------------

BIT_WIDTHS = {'ebool': 1, 'euint8': 8, 'euint64': 64}

def domain_hash(*parts):
    s = "|".join(str(x) for x in parts)
    return hashlib.sha3("XFHE:v1|" + s)

def bound(kind: str, value: int):
    return value % (2 ** BIT_WIDTHS[kind])

def check_kind(kind: str):
    assert kind in BIT_WIDTHS, 'ValidationError: unknown ciphertext kind ' + str(kind)

# -----------------------------------------------------------------------------
# State
# -----------------------------------------------------------------------------

# handle -> {'kind': str, 'value': int}
ciphertexts = Hash()

# proof -> {'contract': str, 'account': str, 'handles': list, 'kinds': list}
input_proofs = Hash()

next_ct_id = Variable()

# -----------------------------------------------------------------------------
# Construction
# -----------------------------------------------------------------------------

@construct
def seed():
    next_ct_id.set(1)

# -----------------------------------------------------------------------------
# Internals
# -----------------------------------------------------------------------------

def store(kind, value):
    cid = next_ct_id.get()
    next_ct_id.set(cid + 1)

    handle = domain_hash('ct', cid, kind)
    ciphertexts[handle] = {'kind': kind, 'value': bound(kind, value)}
    return handle

def load(handle):
    entry = ciphertexts[handle]
    assert entry is not None, 'ValidationError: unknown ciphertext handle'
    return entry

def load_pair(a, b):
    left = load(a)
    right = load(b)
    assert left['kind'] == right['kind'], 'ValidationError: operand kinds differ'
    return left, right

# -----------------------------------------------------------------------------
# Algebra
# -----------------------------------------------------------------------------

@export
def trivial_encrypt(value: int, kind: str):
    check_kind(kind)
    assert value >= 0, 'ValidationError: encrypted integers are unsigned'
    return store(kind, value)

@export
def add(a: str, b: str):
    left, right = load_pair(a, b)
    return store(left['kind'], left['value'] + right['value'])

@export
def sub(a: str, b: str):
    left, right = load_pair(a, b)
    return store(left['kind'], left['value'] - right['value'])

@export
def lt(a: str, b: str):
    left, right = load_pair(a, b)
    return store('ebool', 1 if left['value'] < right['value'] else 0)

@export
def le(a: str, b: str):
    left, right = load_pair(a, b)
    return store('ebool', 1 if left['value'] <= right['value'] else 0)

@export
def eq(a: str, b: str):
    left, right = load_pair(a, b)
    return store('ebool', 1 if left['value'] == right['value'] else 0)

@export
def logical_and(a: str, b: str):
    left, right = load_pair(a, b)
    assert left['kind'] == 'ebool', 'ValidationError: logical_and expects ebool operands'
    return store('ebool', left['value'] & right['value'])

@export
def select(condition: str, a: str, b: str):
    cond = load(condition)
    assert cond['kind'] == 'ebool', 'ValidationError: select condition must be ebool'
    left, right = load_pair(a, b)
    chosen = left if cond['value'] == 1 else right
    return store(left['kind'], chosen['value'])

# -----------------------------------------------------------------------------
# External inputs
# -----------------------------------------------------------------------------

@export
def register_input(contract: str, values: list, kinds: list):
    # Client-side encryption step: bundle is bound to (contract, account)
    assert len(values) > 0, 'ValidationError: empty input bundle'
    assert len(values) == len(kinds), 'ValidationError: values and kinds differ in length'

    handles = []
    for i in range(len(values)):
        check_kind(kinds[i])
        value = values[i]
        assert isinstance(value, int) and 0 <= value < 2 ** BIT_WIDTHS[kinds[i]], \
            'ValidationError: input does not fit ' + kinds[i]
        handles.append(store(kinds[i], value))

    proof = domain_hash('proof', contract, ctx.caller, ",".join(handles))
    input_proofs[proof] = {
        'contract': contract,
        'account': ctx.caller,
        'handles': handles,
        'kinds': kinds
    }

    return {'handles': handles, 'proof': proof}

@export
def from_external(handles: list, kinds: list, proof: str, account: str):
    bundle = input_proofs[proof]
    assert bundle is not None, 'ProofError: unknown input proof'
    assert bundle['contract'] == ctx.caller, 'ProofError: proof issued for another contract'
    assert bundle['account'] == account, 'ProofError: proof issued for another account'
    assert bundle['handles'] == handles, 'ProofError: handles do not match proof'
    assert bundle['kinds'] == kinds, 'ProofError: ciphertext kinds do not match proof'

    # All checks pass before any internal handle is written
    converted = []
    for handle in handles:
        entry = load(handle)
        converted.append(store(entry['kind'], entry['value']))
    return converted
