import json

import pytest

from infimum.zk import (FIELD_BITS, FIELD_MODULUS, FieldArithmetic,
                        GrainLFSR, PoseidonHasher, PoseidonParameters,
                        circom_parameters, from_field_bytes, is_field_bytes,
                        poseidon_hash, to_field_bytes)


def test_field_bytes_are_32_byte_big_endian():
    encoded = to_field_bytes(1)
    assert len(encoded) == 32
    assert encoded == b"\x00" * 31 + b"\x01"
    assert from_field_bytes(encoded) == 1


def test_from_field_bytes_rejects_wrong_width():
    with pytest.raises(ValueError):
        from_field_bytes(b"\x01" * 31)


def test_field_bytes_must_be_canonical():
    assert is_field_bytes(to_field_bytes(FIELD_MODULUS - 1))
    assert not is_field_bytes(FIELD_MODULUS.to_bytes(32, "big"))
    assert not is_field_bytes(b"\xff" * 32)
    assert not is_field_bytes(b"\x01" * 31)


def test_field_inverse():
    field = FieldArithmetic()
    inv = field.inverse(7)
    assert (inv * 7) % FIELD_MODULUS == 1
    with pytest.raises(ZeroDivisionError):
        field.inverse(0)


def test_hash_is_deterministic_and_in_field(hasher):
    a, b = to_field_bytes(1), to_field_bytes(2)
    h1 = hasher.hash2(a, b)
    assert h1 == hasher.hash2(a, b)
    assert len(h1) == 32
    assert from_field_bytes(h1) < FIELD_MODULUS


def test_hash2_is_not_symmetric(hasher):
    a, b = to_field_bytes(1), to_field_bytes(2)
    assert hasher.hash2(a, b) != hasher.hash2(b, a)


def test_hash_many_depends_on_arity(hasher):
    one = to_field_bytes(1)
    assert hasher.hash_many([one, one]) == hasher.hash2(one, one)
    assert hasher.hash_many([one, one, one]) != hasher.hash_many([one, one])


def test_hash_many_rejects_too_many_inputs(hasher):
    with pytest.raises(ValueError):
        hasher.hash_many([to_field_bytes(i) for i in range(6)])


def test_module_level_hash_matches_hasher(hasher):
    assert to_field_bytes(poseidon_hash([3, 4])) == hasher.hash2(
        to_field_bytes(3), to_field_bytes(4))


def test_parameters_shape():
    params = circom_parameters(3)
    assert params.partial_rounds == 57
    assert len(params.round_constants) == (8 + 57) * 3
    assert len(params.mds_matrix) == 3


def test_parameters_reject_wrong_constant_count():
    with pytest.raises(ValueError):
        PoseidonParameters(width=2, round_constants=[1, 2, 3], mds_matrix=[[1, 0], [0, 1]])


def test_constants_file_round_trips_generated_parameters(tmp_path):
    generated = {t: circom_parameters(t) for t in (2, 3)}
    constants_file = tmp_path / "poseidon_constants.json"
    constants_file.write_text(json.dumps({
        "C": [[hex(c) for c in generated[t].round_constants] for t in (2, 3)],
        "M": [[[str(m) for m in row] for row in generated[t].mds_matrix] for t in (2, 3)]
    }))

    loaded = PoseidonHasher.from_constants_file(constants_file)
    default = PoseidonHasher()
    a, b = to_field_bytes(11), to_field_bytes(12)
    assert loaded.hash2(a, b) == default.hash2(a, b)
    assert loaded.hash_many([a]) == default.hash_many([a])


# circomlibjs poseidon([1] * n) for n = 1..5, big-endian
CIRCOMLIBJS_ONES = [
    bytes([41, 23, 97, 0, 234, 169, 98, 189, 193, 254, 108, 101, 77, 106, 60, 19,
           14, 150, 164, 209, 22, 139, 51, 132, 139, 137, 125, 197, 2, 130, 1, 51]),
    bytes([0, 122, 243, 70, 226, 211, 4, 39, 158, 121, 224, 169, 243, 2, 63, 119,
           18, 148, 167, 138, 203, 112, 231, 63, 144, 175, 226, 124, 173, 64, 30, 129]),
    bytes([2, 192, 6, 110, 16, 167, 42, 189, 43, 51, 195, 178, 20, 203, 62, 129,
           188, 177, 182, 227, 9, 97, 205, 35, 194, 2, 177, 134, 115, 191, 37, 67]),
    bytes([8, 44, 156, 55, 10, 13, 36, 244, 65, 111, 188, 65, 74, 55, 104, 31,
           120, 68, 45, 39, 216, 99, 133, 153, 28, 23, 214, 252, 12, 75, 125, 113]),
    bytes([16, 56, 150, 5, 174, 104, 141, 79, 20, 219, 133, 49, 34, 196, 125, 102,
           168, 3, 199, 43, 65, 88, 156, 177, 191, 134, 135, 65, 178, 6, 185, 187]),
]


def test_circomlibjs_single_input():
    assert poseidon_hash([1]) == \
        18586133768512220936620570745912940619677854269274689475585506675881198879027


def test_circomlibjs_one_two():
    assert poseidon_hash([1, 2]) == \
        7853200120776062878684798364095072458815029376092732009249414926327459813530


@pytest.mark.parametrize("n_inputs", range(1, 6))
def test_circomlibjs_ones(hasher, n_inputs):
    ones = [to_field_bytes(1)] * n_inputs
    assert hasher.hash_many(ones) == CIRCOMLIBJS_ONES[n_inputs - 1]
    twos = [to_field_bytes(2)] * n_inputs
    assert hasher.hash_many(twos) != CIRCOMLIBJS_ONES[n_inputs - 1]


def test_circomlibjs_byte_inputs(hasher):
    assert hasher.hash2(b"\x01" * 32, b"\x02" * 32) == bytes([
        13, 84, 225, 147, 143, 138, 140, 28, 125, 235, 94, 3, 85, 242, 99, 25,
        32, 123, 132, 254, 156, 162, 206, 27, 38, 231, 53, 200, 41, 130, 25, 144])


def test_generated_parameters_are_cached():
    assert circom_parameters(3) is circom_parameters(3)
    assert PoseidonHasher().parameters(3) is PoseidonHasher().parameters(3)


def test_grain_stream_depends_on_width():
    first = GrainLFSR(2, 56).next_int()
    assert first == GrainLFSR(2, 56).next_int()
    assert first != GrainLFSR(3, 57).next_int()
    assert first.bit_length() <= FIELD_BITS


def test_generate_rejects_unsupported_width():
    with pytest.raises(ValueError):
        PoseidonParameters.generate(7)
