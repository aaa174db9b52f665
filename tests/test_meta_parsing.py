"""Tests for type, method definition and RLP parsing."""

import random
import string

import pytest
import rlp

from near_gateway_sdk.meta import (
    AddressType,
    ArgsLengthMismatch,
    ArgumentParseError,
    ArrayType,
    BoolType,
    BytesType,
    CustomType,
    FixedBytesType,
    IntType,
    InvalidMetaTransactionFunctionArg,
    InvalidMetaTransactionMethodName,
    MethodAndTypes,
    ParsingError,
    RlpBytes,
    RlpList,
    StringType,
    UintType,
    decode_rlp_args,
    decode_rlp_value,
    method_signature,
    parse_type,
)


def rand_identifier(rng: random.Random) -> str:
    """Random struct name; the upper-case first letter never clashes with a keyword."""
    rest = "".join(rng.choice(string.ascii_letters + string.digits) for _ in range(7))
    return rng.choice(string.ascii_uppercase) + rest


def array_type_string(inner: str, size) -> str:
    return f"{inner}[{'' if size is None else size}]"


class TestParseType:
    """Tests for single argument type parsing."""

    def test_fixed_bytes(self):
        """Test bytesN and byte."""
        for n in range(1, 33):
            assert parse_type(f"bytes{n}") == FixedBytesType(n)
        assert parse_type("byte") == FixedBytesType(1)

    def test_sized_integers(self):
        """Test uintN / intN for every multiple of 8."""
        for n in range(1, 33):
            assert parse_type(f"uint{8 * n}") == UintType()
            assert parse_type(f"int{8 * n}") == IntType()
        assert parse_type("uint") == UintType()
        assert parse_type("int") == IntType()

    def test_other_atomic_types(self):
        """Test address, bool, string and bytes."""
        assert parse_type("address") == AddressType()
        assert parse_type("bool") == BoolType()
        assert parse_type("string") == StringType()
        assert parse_type("bytes") == BytesType()

    def test_custom_types(self):
        """Test that other identifiers are struct references."""
        rng = random.Random(7)
        for _ in range(255):
            name = rand_identifier(rng)
            assert parse_type(name) == CustomType(name)
        assert parse_type("_private") == CustomType("_private")

    def test_nested_array_order(self):
        """Test that the rightmost suffix is the outermost array."""
        assert parse_type("uint256[3][]") == ArrayType(
            inner=ArrayType(inner=UintType(), length=3), length=None
        )

    def test_arrays_of_every_type(self):
        """Test single and nested arrays over all atomic types."""
        rng = random.Random(11)
        inner_types = (
            [f"bytes{n}" for n in range(1, 33)]
            + [f"uint{8 * n}" for n in range(1, 33)]
            + [f"int{8 * n}" for n in range(1, 33)]
            + ["bool", "address", rand_identifier(rng), "bytes", "string"]
        )
        for text in inner_types:
            inner = parse_type(text)

            size = rng.choice([None, rng.randrange(256)])
            single = array_type_string(text, size)
            expected = ArrayType(inner=inner, length=size)
            assert parse_type(single) == expected

            size = rng.choice([None, rng.randrange(256)])
            nested = array_type_string(single, size)
            assert parse_type(nested) == ArrayType(inner=expected, length=size)

    def test_deterministic(self):
        """Test that repeated parses agree."""
        assert parse_type("PetObj[2][]") == parse_type("PetObj[2][]")

    @pytest.mark.parametrize(
        "text",
        [
            "27182818",
            "Some.InvalidType",
            "Some::NotType",
            "*AThing*",
            "",
            "[]",
            "[3]uint256",
            "uint256[3]bool",
            "uint256[x]",
            "uint256 ",
        ],
    )
    def test_invalid_types(self, text):
        """Test that malformed type text fails."""
        with pytest.raises(ArgumentParseError):
            parse_type(text)

    @pytest.mark.parametrize(
        "text", ["uint7", "uint264", "int0", "uint08", "bytes0", "bytes33", "bytes01"]
    )
    def test_non_canonical_sizes(self, text):
        """Test that out-of-range sizes are rejected instead of defaulted."""
        with pytest.raises(ArgumentParseError, match="Invalid"):
            parse_type(text)

    def test_nesting_bound(self):
        """Test the array nesting limit."""
        assert isinstance(parse_type("uint" + "[]" * 32), ArrayType)
        with pytest.raises(ArgumentParseError, match="nested"):
            parse_type("uint" + "[]" * 33)


class TestMethodAndTypes:
    """Tests for method definition parsing."""

    def test_method_with_struct(self):
        """Test a method whose argument is a declared struct."""
        methods = MethodAndTypes.parse("adopt(uint256 petId,PetObj petObj)PetObj(string name)")

        assert methods.method.name == "adopt"
        assert methods.method.raw == "adopt(uint256 petId,PetObj petObj)"
        assert [arg.name for arg in methods.method.args] == ["petId", "petObj"]
        assert [arg.t for arg in methods.method.args] == [UintType(), CustomType("PetObj")]

        assert methods.type_sequences == ["PetObj"]
        pet = methods.types["PetObj"]
        assert pet.raw == "PetObj(string name)"
        assert len(pet.args) == 1
        assert pet.args[0].t == StringType()

        assert method_signature(methods) == "adopt(uint256,PetObj)"

    def test_declaration_order(self):
        """Test that struct declaration order is preserved."""
        methods = MethodAndTypes.parse(
            "trade(Order o)Order(Asset give,Asset take)Asset(address token,uint256 amount)"
        )
        assert methods.type_sequences == ["Order", "Asset"]
        assert methods.types["Order"].raw == "Order(Asset give,Asset take)"

    def test_signature_keeps_raw_types(self):
        """Test that array suffixes and sizes are kept byte-exact."""
        methods = MethodAndTypes.parse("f(uint[] a,PetObj[2] b,bytes8 c)PetObj(string n)")
        assert method_signature(methods) == "f(uint[],PetObj[2],bytes8)"

    def test_no_args(self):
        """Test a method without arguments."""
        methods = MethodAndTypes.parse("create()")
        assert methods.method.name == "create"
        assert methods.method.args == []
        assert methods.types == {}
        assert method_signature(methods) == "create()"

    @pytest.mark.parametrize(
        "text",
        [
            "adopt(uint256)",
            "adopt(uint256 a",
            "adopt(",
            "adopt",
            "(uint256 a)",
            "1adopt()",
            "adopt(uint256  a)",
            "adopt()x",
            "adopt() ",
            "adopt(uint256 a)X(string b)X(string c)",
        ],
    )
    def test_grammar_violations(self, text):
        """Test that grammar violations are method name errors."""
        with pytest.raises(InvalidMetaTransactionMethodName):
            MethodAndTypes.parse(text)

    def test_space_after_comma(self):
        """Test that a space after a comma leaves an empty type."""
        with pytest.raises(ArgumentParseError):
            MethodAndTypes.parse("adopt(uint256 a, uint256 b)")

    def test_undeclared_struct(self):
        """Test that every referenced struct must be declared."""
        with pytest.raises(InvalidMetaTransactionFunctionArg, match="Unknown struct"):
            MethodAndTypes.parse("adopt(PetObj[] pets)")
        with pytest.raises(InvalidMetaTransactionFunctionArg, match="Owner"):
            MethodAndTypes.parse("adopt(PetObj pet)PetObj(Owner owner)")


class TestRlpValues:
    """Tests for RLP argument decoding."""

    def test_nested_values(self):
        """Test byte strings and lists decode to their tagged values."""
        values = decode_rlp_args(rlp.encode([b"a", [b"bc", []], b""]))
        assert values == [
            RlpBytes(b"a"),
            RlpList((RlpBytes(b"bc"), RlpList(()))),
            RlpBytes(b""),
        ]

    def test_empty_list(self):
        """Test an empty argument list."""
        assert decode_rlp_args(rlp.encode([])) == []

    def test_single_value(self):
        """Test decoding a lone byte string."""
        assert decode_rlp_value(rlp.encode(b"hello")) == RlpBytes(b"hello")

    def test_outer_value_must_be_list(self):
        """Test that a top-level byte string is rejected."""
        with pytest.raises(InvalidMetaTransactionFunctionArg):
            decode_rlp_args(rlp.encode(b"hello"))

    @pytest.mark.parametrize(
        "data",
        [b"", b"\xc5\x01", b"\x83ab", rlp.encode([]) + b"\x00", b"\x81\x05"],
    )
    def test_malformed(self, data):
        """Test truncated, trailing and non-canonical payloads."""
        with pytest.raises(ArgumentParseError):
            decode_rlp_args(data)

    def test_depth_bound(self):
        """Test that deeply nested lists are rejected."""
        nested = []
        for _ in range(9):
            nested = [nested]
        assert len(decode_rlp_args(rlp.encode(nested))) == 1

        for _ in range(40):
            nested = [nested]
        with pytest.raises(ArgumentParseError, match="nested"):
            decode_rlp_args(rlp.encode(nested))

    def test_custom_depth_bound(self):
        """Test a codec-supplied depth bound."""
        assert decode_rlp_args(rlp.encode([[]]), max_depth=2) == [RlpList(())]
        with pytest.raises(ArgumentParseError):
            decode_rlp_args(rlp.encode([[[]]]), max_depth=2)


class TestErrors:
    """Tests for the error hierarchy."""

    def test_common_root(self):
        """Test that every kind shares the ParsingError root."""
        for kind in (
            ArgumentParseError,
            InvalidMetaTransactionMethodName,
            InvalidMetaTransactionFunctionArg,
            ArgsLengthMismatch,
        ):
            assert issubclass(kind, ParsingError)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
