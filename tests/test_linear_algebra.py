import pytest

from linear_algebra import (BitMatrix, BitVector, ConversionError, GaussElimination,
                            InconsistentSystemError, UnderDeterminedSystemError, solve)
from util import random


def test_vector_creation():
    vector = BitVector(123)
    assert vector.dimension == 123
    for i in range(vector.dimension):
        if i % 2 == 1:
            vector.set(i, 1)
    assert [vector.get(i) for i in range(vector.dimension)] == [i % 2 for i in range(123)]

    assert list(BitVector.zeroes(100)) == [0] * 100
    assert list(BitVector.ones(101)) == [1] * 101
    assert len(BitVector.zeroes(130).limbs) == 3


@pytest.mark.parametrize("dimension", [8, 16, 32, 64, 128])
def test_uint_conversion(dimension):
    for value in [0, 1, 2**dimension - 1, random.getrandbits(dimension)]:
        assert BitVector.from_uint(value, dimension).to_uint() == value
        assert BitVector.from_uint(value, dimension).to_uint(dimension) == value

    vector = BitVector.random(dimension)
    assert BitVector.from_uint(vector.to_uint(), dimension) == vector


def test_uint_conversion_uses_bit_order():
    vector = BitVector.from_uint(0b1011, 8)
    assert list(vector) == [1, 1, 0, 1, 0, 0, 0, 0]
    assert repr(vector) == "BitVector('11010000')"
    assert str(BitVector.from_uint(1, 8)) == "(1, 0, 0, 0, 0, 0, 0, 0)"


def test_conversion_errors():
    with pytest.raises(ConversionError):
        BitVector.zeroes(31).to_uint()
    with pytest.raises(ConversionError):
        BitVector.zeroes(32).to_uint(64)
    with pytest.raises(ConversionError):
        BitVector.from_uint(5, 12)
    with pytest.raises(ConversionError):
        BitVector.from_uint(256, 8)
    with pytest.raises(ConversionError):
        BitVector.from_uint(-1, 8)
    # Conversion errors can be handled like any other ValueError.
    assert issubclass(ConversionError, ValueError)


@pytest.mark.parametrize("dimension", [63, 64, 65, 127, 128, 192])
def test_ones_at_limb_boundaries(dimension):
    ones = BitVector.ones(dimension)
    assert list(ones) == [1] * dimension
    assert all(limb != 0 for limb in ones.limbs)
    assert ones.limbs[-1] < 2**64
    if dimension in (64, 128):
        assert ones == BitVector.from_uint(2**dimension - 1, dimension)


def test_invalid_vector_access():
    vector = BitVector(255)
    with pytest.raises(IndexError):
        vector.get(255)
    with pytest.raises(IndexError):
        vector.set(-1, 1)
    with pytest.raises(IndexError):
        vector.swap(0, 300)
    with pytest.raises(IndexError):
        vector.add_xor(255, 1)


def test_swap_and_add_xor():
    vector = BitVector.from_uint(0b01, 8)
    vector.swap(0, 7)
    assert vector.to_uint() == 0b10000000
    vector.add_xor(7, 1)
    vector.add_xor(3, 1)
    vector.add_xor(2, 0)
    assert vector.to_uint() == 0b1000


def test_vector_addition():
    lhs = BitVector.zeroes(17)
    rhs = BitVector.zeroes(17)
    for i in range(17):
        if i % 2 == 0:
            lhs.set(i, 1)
        else:
            rhs.set(i, 1)
    assert lhs + rhs == BitVector.ones(17)

    result = lhs.copy()
    result += rhs
    assert result == BitVector.ones(17)
    # lhs + rhs doesn't modify its operands.
    assert lhs != result
    assert rhs != result


def test_vector_addition_is_self_inverse():
    for dimension in [1, 32, 64, 100, 128, 200]:
        v = BitVector.random(dimension)
        w = BitVector.random(dimension)
        assert v + v == BitVector.zeroes(dimension)
        assert (v + w) + w == v
        assert (v + v).is_zero()


def test_vector_addition_dimension_mismatch():
    with pytest.raises(ValueError):
        BitVector.zeroes(16) + BitVector.zeroes(17)


def test_matrix_creation():
    matrix = BitMatrix(25, 43)
    assert matrix.dimensions == (25, 43)
    for i in range(25):
        for j in range(43):
            if (i + j) % 2 == 1:
                matrix.set(i, j, 1)
    for i in range(25):
        for j in range(43):
            assert matrix.get(i, j) == (i + j) % 2

    zeroes = BitMatrix.zeroes(32, 33)
    ones = BitMatrix.ones(32, 33)
    diagonal = BitMatrix.diagonal(32)
    for i in range(32):
        assert zeroes.get_row(i) == BitVector.zeroes(33)
        assert ones.get_row(i) == BitVector.ones(33)
        for j in range(32):
            assert diagonal.get(i, j) == (1 if i == j else 0)
    assert BitMatrix.identity(32) == diagonal
    assert BitMatrix.random(10, 70).dimensions == (10, 70)


def test_invalid_matrix_access():
    matrix = BitMatrix(12, 34)
    with pytest.raises(IndexError):
        matrix.get(12, 0)
    with pytest.raises(IndexError):
        matrix.get(0, 34)
    with pytest.raises(IndexError):
        matrix.set(-1, 0, 1)
    with pytest.raises(IndexError):
        matrix.swap_rows(0, 12)
    with pytest.raises(ValueError):
        matrix.set_row(0, BitVector(33))


def test_row_operations():
    matrix = BitMatrix.diagonal(4)
    row = matrix.get_row(0)
    row.set(3, 1)
    # get_row returns a copy.
    assert matrix.get(0, 3) == 0

    matrix.set_row(1, row)
    row.set(2, 1)
    assert list(matrix.get_row(1)) == [1, 0, 0, 1]

    matrix.swap_rows(0, 1)
    assert list(matrix.get_row(0)) == [1, 0, 0, 1]
    assert list(matrix.get_row(1)) == [1, 0, 0, 0]

    matrix.add_row(2, matrix.get_row(0))
    assert list(matrix.get_row(2)) == [1, 0, 1, 1]

    matrix.add_xor(3, 3, 1)
    assert matrix.get(3, 3) == 0


def test_matrix_addition():
    lhs = BitMatrix.zeroes(17, 17)
    rhs = BitMatrix.zeroes(17, 17)
    for i in range(17):
        for j in range(17):
            if (i + j) % 2 == 0:
                lhs.set(i, j, 1)
            else:
                rhs.set(i, j, 1)
    assert lhs + rhs == BitMatrix.ones(17, 17)

    result = lhs.copy()
    result += rhs
    assert result == BitMatrix.ones(17, 17)
    assert lhs != result

    with pytest.raises(ValueError):
        lhs + BitMatrix.zeroes(17, 18)


def test_matrix_shifts():
    matrix = BitMatrix.random(8, 5)
    down = matrix << 3
    up = matrix >> 3
    assert down == matrix.shl(3)
    assert up == matrix.shr(3)
    for i in range(8):
        if i >= 3:
            assert down.get_row(i) == matrix.get_row(i - 3)
        else:
            assert down.get_row(i).is_zero()
        if i + 3 < 8:
            assert up.get_row(i) == matrix.get_row(i + 3)
        else:
            assert up.get_row(i).is_zero()
    assert (matrix << 8) == BitMatrix.zeroes(8, 5)
    assert (matrix >> 0) == matrix


def test_matrix_mask():
    matrix = BitMatrix.ones(8, 12)
    masked = matrix & BitVector.from_uint(0b10100001, 8)
    assert masked == matrix.mask(BitVector.from_uint(0b10100001, 8))
    for i in range(8):
        expected = BitVector.ones(12) if i in (0, 5, 7) else BitVector.zeroes(12)
        assert masked.get_row(i) == expected
    with pytest.raises(ValueError):
        matrix & BitVector(12)


def test_matrix_vector_product():
    vector = BitVector.random(100)
    assert BitMatrix.diagonal(100) * vector == vector
    assert (BitMatrix.zeroes(3, 100) * vector).is_zero()

    matrix = BitMatrix.zeroes(2, 3)
    matrix.set(0, 0, 1)
    matrix.set(0, 2, 1)
    matrix.set(1, 1, 1)
    product = matrix * BitVector.ones(3)
    assert list(product) == [0, 1]


def test_matrix_str():
    matrix = BitMatrix.diagonal(3)
    assert str(matrix) == "/ 1, 0, 0 \\\n| 0, 1, 0 |\n\\ 0, 0, 1 /"
    assert repr(matrix) == "BitMatrix(['100', '010', '001'])"


def random_solvable_system(size):
    """Build lhs and rhs by scrambling the identity and a known solution."""
    lhs = BitMatrix.diagonal(size)
    rhs = BitVector.random(size)
    solution = rhs.copy()
    for i in range(size):
        # Randomly add the current row to other rows.
        for j in range(size):
            if i != j and random.getrandbits(1):
                lhs.add_row(j, lhs.get_row(i))
                rhs.add_xor(j, rhs.get(i))
        j = random.randrange(size)
        lhs.swap_rows(i, j)
        rhs.swap(i, j)
    return lhs, rhs, solution


def test_gauss_elimination():
    for size in [1, 2, 32, 64, 65] + [random.randint(1, 255) for _ in range(5)]:
        lhs, rhs, solution = random_solvable_system(size)
        assert GaussElimination(lhs, rhs).solve() == solution


def test_solve_keeps_inputs():
    lhs, rhs, solution = random_solvable_system(40)
    lhs_copy, rhs_copy = lhs.copy(), rhs.copy()
    assert solve(lhs, rhs) == solution
    assert solve(lhs, rhs) == solution
    assert lhs == lhs_copy
    assert rhs == rhs_copy


def test_solver_is_single_use():
    solver = GaussElimination(BitMatrix.diagonal(4), BitVector.ones(4))
    assert solver.solve() == BitVector.ones(4)
    with pytest.raises(RuntimeError):
        solver.solve()


def test_solver_dimension_mismatch():
    with pytest.raises(ValueError):
        GaussElimination(BitMatrix.diagonal(4), BitVector.ones(5))


def test_under_determined_system():
    lhs, rhs, _ = random_solvable_system(20)
    for row in range(20):
        lhs.set(row, 7, 0)
    with pytest.raises(UnderDeterminedSystemError):
        GaussElimination(lhs, rhs).solve()


def test_under_determined_wide_system():
    lhs = BitMatrix.ones(3, 5)
    with pytest.raises(UnderDeterminedSystemError):
        GaussElimination(lhs, BitVector.zeroes(3)).solve()


def test_over_determined_system():
    # Rows 0-9 are the identity and rows 10-14 repeat some of them.
    lhs = BitMatrix.zeroes(15, 10)
    for i in range(10):
        lhs.set(i, i, 1)
    for i in range(10, 15):
        lhs.set_row(i, lhs.get_row(i - 10) + lhs.get_row(i - 5))
    solution = BitVector.random(10)
    rhs = lhs * solution
    assert solve(lhs, rhs) == solution

    rhs.add_xor(12, 1)
    with pytest.raises(InconsistentSystemError):
        GaussElimination(lhs, rhs).solve()
