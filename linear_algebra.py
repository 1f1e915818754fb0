"""Vectors, matrices and Gauss elimination over the two element field {0, 1}.

Addition in this field is XOR and multiplication is AND, so adding a vector
to itself always gives the zero vector.
"""

from util import bit_mask, bit_string, random

LIMB_SIZE = 64
FULL_LIMB = bit_mask(LIMB_SIZE)

# Integer widths that a BitVector can be converted to and from.
UINT_WIDTHS = (8, 16, 32, 64, 128)


class LinearAlgebraError(ValueError):
    pass


class ConversionError(LinearAlgebraError):
    pass


class UnderDeterminedSystemError(LinearAlgebraError):
    pass


class InconsistentSystemError(LinearAlgebraError):
    pass


def _limb_count(dimension):
    return (dimension + LIMB_SIZE - 1) // LIMB_SIZE


def _last_limb_mask(dimension):
    # When dimension is a multiple of 64 the last limb is completely used,
    # and bit_mask(dimension % 64) would be 0 instead of all ones.
    return bit_mask(dimension % LIMB_SIZE or LIMB_SIZE)


class BitVector:
    """A vector over GF(2), packed into 64-bit limbs.

    Element i is stored in bit i % 64 of limb i // 64, so element i of a
    vector created with from_uint is bit i of the integer. Bits past the
    dimension in the last limb are always zero, which makes comparing limbs
    the same as comparing elements.
    """

    def __init__(self, dimension):
        if dimension < 0:
            raise ValueError("dimension must not be negative")
        self._dimension = dimension
        self.limbs = [0] * _limb_count(dimension)

    @property
    def dimension(self):
        return self._dimension

    @classmethod
    def zeroes(cls, dimension):
        return cls(dimension)

    @classmethod
    def ones(cls, dimension):
        result = cls(dimension)
        result.limbs = [FULL_LIMB] * len(result.limbs)
        if result.limbs:
            result.limbs[-1] &= _last_limb_mask(dimension)
        return result

    @classmethod
    def random(cls, dimension):
        value = random.getrandbits(dimension) if dimension else 0
        return cls._from_int(value, dimension)

    @classmethod
    def from_uint(cls, value, dimension):
        if dimension not in UINT_WIDTHS:
            raise ConversionError("unsupported integer width: {}".format(dimension))
        if not 0 <= value <= bit_mask(dimension):
            raise ConversionError("{} does not fit in {} bits".format(value, dimension))
        return cls._from_int(value, dimension)

    @classmethod
    def _from_int(cls, value, dimension):
        result = cls(dimension)
        for i in range(len(result.limbs)):
            result.limbs[i] = (value >> (i * LIMB_SIZE)) & FULL_LIMB
        return result

    def to_uint(self, width=None):
        """Return the vector as an unsigned integer of the given width.

        If width is not given, the dimension of the vector is used. Raises
        ConversionError if the width is unsupported or doesn't match the
        dimension.
        """
        if width is None:
            width = self._dimension
        if width not in UINT_WIDTHS or width != self._dimension:
            raise ConversionError("cannot convert a vector of dimension {} to a {}-bit "
                                  "integer".format(self._dimension, width))
        result = 0
        for i, limb in enumerate(self.limbs):
            result |= limb << (i * LIMB_SIZE)
        return result

    def _check_index(self, index):
        if not 0 <= index < self._dimension:
            raise IndexError("index {} out of range for dimension {}".format(
                index, self._dimension))

    def get(self, index):
        self._check_index(index)
        return (self.limbs[index // LIMB_SIZE] >> (index % LIMB_SIZE)) & 1

    def set(self, index, value):
        self._check_index(index)
        bit = 1 << (index % LIMB_SIZE)
        if value & 1:
            self.limbs[index // LIMB_SIZE] |= bit
        else:
            self.limbs[index // LIMB_SIZE] &= ~bit

    def swap(self, first, second):
        first_value = self.get(first)
        self.set(first, self.get(second))
        self.set(second, first_value)

    def add_xor(self, index, value):
        self._check_index(index)
        self.limbs[index // LIMB_SIZE] ^= (value & 1) << (index % LIMB_SIZE)

    def is_zero(self):
        return not any(self.limbs)

    def copy(self):
        result = BitVector(self._dimension)
        result.limbs = list(self.limbs)
        return result

    def __add__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        result = self.copy()
        result += other
        return result

    def __iadd__(self, other):
        if not isinstance(other, BitVector):
            return NotImplemented
        if self._dimension != other.dimension:
            raise ValueError("cannot add vectors of dimensions {} and {}".format(
                self._dimension, other.dimension))
        self.limbs = [x ^ y for x, y in zip(self.limbs, other.limbs)]
        return self

    def __eq__(self, other):
        if not isinstance(other, BitVector):
            return NotImplemented
        return self._dimension == other.dimension and self.limbs == other.limbs

    __hash__ = None

    def __len__(self):
        return self._dimension

    def __iter__(self):
        return (self.get(i) for i in range(self._dimension))

    def __repr__(self):
        return "BitVector('{}')".format(bit_string(self))

    def __str__(self):
        return "({})".format(", ".join(str(bit) for bit in self))


class BitMatrix:
    """A matrix over GF(2), stored as a list of BitVector rows."""

    def __init__(self, rows, columns):
        if rows < 0:
            raise ValueError("number of rows must not be negative")
        self._dimensions = (rows, columns)
        self._rows = [BitVector(columns) for _ in range(rows)]

    @property
    def dimensions(self):
        return self._dimensions

    @classmethod
    def zeroes(cls, rows, columns):
        return cls(rows, columns)

    @classmethod
    def ones(cls, rows, columns):
        return cls._from_rows([BitVector.ones(columns) for _ in range(rows)], columns)

    @classmethod
    def diagonal(cls, dimension):
        result = cls(dimension, dimension)
        for i in range(dimension):
            result.set(i, i, 1)
        return result

    identity = diagonal

    @classmethod
    def random(cls, rows, columns):
        return cls._from_rows([BitVector.random(columns) for _ in range(rows)], columns)

    @classmethod
    def _from_rows(cls, rows, columns):
        # The rows must be BitVectors of the given dimension that nothing
        # else holds a reference to.
        result = cls(0, columns)
        result._rows = rows
        result._dimensions = (len(rows), columns)
        return result

    def _check_row(self, row):
        if not 0 <= row < self._dimensions[0]:
            raise IndexError("row {} out of range for {} rows".format(
                row, self._dimensions[0]))

    def get(self, row, column):
        self._check_row(row)
        return self._rows[row].get(column)

    def set(self, row, column, value):
        self._check_row(row)
        self._rows[row].set(column, value)

    def add_xor(self, row, column, value):
        self._check_row(row)
        self._rows[row].add_xor(column, value)

    def get_row(self, row):
        self._check_row(row)
        return self._rows[row].copy()

    def set_row(self, row, vector):
        self._check_row(row)
        if vector.dimension != self._dimensions[1]:
            raise ValueError("row must have dimension {}".format(self._dimensions[1]))
        self._rows[row] = vector.copy()

    def swap_rows(self, first, second):
        self._check_row(first)
        self._check_row(second)
        self._rows[first], self._rows[second] = self._rows[second], self._rows[first]

    def add_row(self, row, vector):
        """Add vector to the given row in place."""
        self._check_row(row)
        self._rows[row] += vector

    def shl(self, count):
        """Return a copy with every row moved down by count rows.

        Row i of the result is row i - count of this matrix, or zero if
        i < count. On a matrix representing a linear map of bits, this is
        the matrix of the map followed by x << count.
        """
        rows, columns = self._dimensions
        if count < 0:
            raise ValueError("negative shift count")
        return self._from_rows([self._rows[i - count].copy() if i >= count
                                else BitVector(columns) for i in range(rows)], columns)

    def shr(self, count):
        """Return a copy with every row moved up by count rows."""
        rows, columns = self._dimensions
        if count < 0:
            raise ValueError("negative shift count")
        return self._from_rows([self._rows[i + count].copy() if i + count < rows
                                else BitVector(columns) for i in range(rows)], columns)

    def mask(self, selector):
        """Return a copy keeping row i only where element i of selector is 1."""
        rows, columns = self._dimensions
        if selector.dimension != rows:
            raise ValueError("selector must have dimension {}".format(rows))
        return self._from_rows([self._rows[i].copy() if selector.get(i)
                                else BitVector(columns) for i in range(rows)], columns)

    def __lshift__(self, count):
        return self.shl(count)

    def __rshift__(self, count):
        return self.shr(count)

    def __and__(self, selector):
        return self.mask(selector)

    def __add__(self, other):
        if not isinstance(other, type(self)):
            return NotImplemented
        result = self.copy()
        result += other
        return result

    def __iadd__(self, other):
        if not isinstance(other, BitMatrix):
            return NotImplemented
        if self._dimensions != other.dimensions:
            raise ValueError("cannot add matrices of dimensions {} and {}".format(
                self._dimensions, other.dimensions))
        for row, other_row in zip(self._rows, other._rows):
            row += other_row
        return self

    def __mul__(self, vector):
        """Return the product of this matrix and a column vector."""
        rows, columns = self._dimensions
        if vector.dimension != columns:
            raise ValueError("vector must have dimension {}".format(columns))
        result = BitVector(rows)
        for i, row in enumerate(self._rows):
            parity = sum(bin(x & y).count("1") for x, y in zip(row.limbs, vector.limbs))
            result.set(i, parity & 1)
        return result

    def copy(self):
        return self._from_rows([row.copy() for row in self._rows], self._dimensions[1])

    def __eq__(self, other):
        if not isinstance(other, BitMatrix):
            return NotImplemented
        return self._dimensions == other.dimensions and self._rows == other._rows

    __hash__ = None

    def __repr__(self):
        return "BitMatrix([{}])".format(", ".join(
            "'{}'".format(bit_string(row)) for row in self._rows))

    def __str__(self):
        rows = self._dimensions[0]
        lines = []
        for i, row in enumerate(self._rows):
            if rows == 1:
                left, right = "[ ", " ]"
            elif i == 0:
                left, right = "/ ", " \\"
            elif i == rows - 1:
                left, right = "\\ ", " /"
            else:
                left, right = "| ", " |"
            lines.append(left + ", ".join(str(bit) for bit in row) + right)
        return "\n".join(lines)


class GaussElimination:
    """Solver for the linear system lhs * x = rhs over GF(2).

    The solver reduces lhs and rhs in place, so it takes ownership of both
    and can only solve once. Use the module level solve() function to keep
    the caller's matrix and vector intact.
    """

    def __init__(self, lhs, rhs):
        if lhs.dimensions[0] != rhs.dimension:
            raise ValueError("lhs has {} rows but rhs has dimension {}".format(
                lhs.dimensions[0], rhs.dimension))
        self.lhs = lhs
        self.rhs = rhs
        self._used = False

    def _pivot(self, column):
        for row in range(column, self.lhs.dimensions[0]):
            if self.lhs.get(row, column):
                self.lhs.swap_rows(column, row)
                self.rhs.swap(column, row)
                return
        raise UnderDeterminedSystemError("no pivot in column {}".format(column))

    def solve(self):
        """Return the unique solution of the system as a BitVector.

        Raises UnderDeterminedSystemError if lhs doesn't have full column
        rank, and InconsistentSystemError if an over-determined system has
        no solution.
        """
        if self._used:
            raise RuntimeError("this solver has already been used")
        self._used = True

        rows, columns = self.lhs.dimensions
        for column in range(columns):
            self._pivot(column)
            pivot_row = self.lhs.get_row(column)
            pivot_value = self.rhs.get(column)
            for row in range(rows):
                if row != column and self.lhs.get(row, column):
                    self.lhs.add_row(row, pivot_row)
                    self.rhs.add_xor(row, pivot_value)

        # After full reduction, the rows below the identity block are all
        # zero in lhs, so their rhs elements must be zero too.
        for row in range(columns, rows):
            if self.rhs.get(row):
                raise InconsistentSystemError("equation {} contradicts the others".format(row))

        if rows == columns:
            return self.rhs
        solution = BitVector(columns)
        for i in range(columns):
            solution.set(i, self.rhs.get(i))
        return solution


def solve(lhs, rhs):
    """Solve lhs * x = rhs without modifying lhs or rhs."""
    return GaussElimination(lhs.copy(), rhs.copy()).solve()
