"""ERC-5202 blueprint container codec.

A blueprint contract wraps deployable initcode behind a preamble that
makes it non-executable:

    0xFE 0x71 <version:6 bits><length encoding:2 bits> [<length bytes>] [<data>] <initcode>

- version: ERC version, 0..63
- length encoding: number of <length bytes> (0, 1 or 2); 0b11 is reserved
- length bytes: big-endian byte count of <data>
- initcode: everything after the data; at least one byte

Reference: "ERC-5202: Blueprint contract format," Ethereum Improvement
Proposals, no. 5202, June 2022. https://eips.ethereum.org/EIPS/eip-5202
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from vypr_core.errors import (
    EmptyInitcodeError,
    EmptyInputError,
    IntParseError,
    InvalidArgumentError,
    NotABlueprintError,
    ReservedBitsSetError,
)

BLUEPRINT_PREFIX = b"\xfe\x71"
"""Magic bytes every blueprint starts with."""

VERSION_MASK = 0b11111100
LENGTH_ENCODING_MASK = 0b00000011
RESERVED_LENGTH_ENCODING = 0b11
MAX_ERC_VERSION = 63
MAX_PREAMBLE_LENGTH = 0xFFFF


class BlueprintContainer(BaseModel):
    """Decoded ERC-5202 blueprint.

    Attributes:
        erc_version: ERC version from the top 6 bits of byte 2
        preamble_data: Optional data between the length field and the initcode
        initcode: Deployable initcode (never empty)

    Example:
        >>> container = decode(bytes.fromhex("fe710000"))
        >>> container.erc_version, container.preamble_data, container.initcode
        (0, None, b'\\x00')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    erc_version: int = Field(default=0, ge=0, le=MAX_ERC_VERSION, description="ERC version")
    preamble_data: bytes | None = Field(default=None, description="Preamble data")
    initcode: bytes = Field(..., min_length=1, description="Initcode")

    @field_validator("preamble_data")
    @classmethod
    def _empty_preamble_is_none(cls, value: bytes | None) -> bytes | None:
        return value or None

    def to_bytes(self) -> bytes:
        """Encode this container with the smallest length encoding."""
        return encode(self)


def decode(bytecode: bytes | bytearray | memoryview) -> BlueprintContainer:
    """Decode ERC-5202 blueprint bytecode.

    Args:
        bytecode: Raw blueprint bytes.

    Returns:
        Decoded BlueprintContainer.

    Raises:
        EmptyInputError: If ``bytecode`` is empty.
        NotABlueprintError: If the 0xFE71 prefix or the version byte is missing.
        ReservedBitsSetError: If the length-encoding bits are 0b11.
        IntParseError: If fewer length bytes are present than declared.
        EmptyInitcodeError: If nothing is left for the initcode.
    """
    data = bytes(bytecode)
    if not data:
        raise EmptyInputError("Empty bytecode")

    if data[:2] != BLUEPRINT_PREFIX:
        raise NotABlueprintError("Not a blueprint: bytecode does not start with 0xFE71")
    if len(data) < 3:
        raise NotABlueprintError("Not a blueprint: missing version byte")

    erc_version = (data[2] & VERSION_MASK) >> 2
    length_encoding = data[2] & LENGTH_ENCODING_MASK
    if length_encoding == RESERVED_LENGTH_ENCODING:
        raise ReservedBitsSetError("Reserved bits are set in the length encoding")

    offset = 3
    length_bytes = data[offset : offset + length_encoding]
    if len(length_bytes) != length_encoding:
        raise IntParseError(
            f"Expected {length_encoding} length byte(s), found {len(length_bytes)}"
        )
    data_length = int.from_bytes(length_bytes, "big")
    offset += length_encoding

    preamble_data: bytes | None = None
    if data_length > 0:
        preamble_data = data[offset : offset + data_length]
        offset += data_length

    initcode = data[offset:]
    if not initcode:
        raise EmptyInitcodeError("Empty initcode")

    return BlueprintContainer(
        erc_version=erc_version,
        preamble_data=preamble_data,
        initcode=initcode,
    )


def decode_hex(text: str) -> BlueprintContainer:
    """Decode a hex-encoded blueprint (``0x`` prefix optional).

    Raises:
        IntParseError: If ``text`` is not valid hex.
        BlueprintError: Any error raised by decode().
    """
    cleaned = text.strip()
    if cleaned[:2].lower() == "0x":
        cleaned = cleaned[2:]
    try:
        raw = bytes.fromhex(cleaned)
    except ValueError as e:
        raise IntParseError(f"Invalid hex bytecode: {e}") from e
    return decode(raw)


def encode(container: BlueprintContainer, length_encoding: int | None = None) -> bytes:
    """Encode a container as ERC-5202 bytecode.

    Args:
        container: Container to encode.
        length_encoding: Number of length bytes (0, 1 or 2). Defaults to the
            smallest encoding that fits the preamble.

    Returns:
        Blueprint bytecode.

    Raises:
        InvalidArgumentError: If the preamble does not fit the requested encoding.
    """
    preamble = container.preamble_data or b""
    size = len(preamble)

    if size > MAX_PREAMBLE_LENGTH:
        raise InvalidArgumentError(
            f"Preamble data is {size} bytes; at most {MAX_PREAMBLE_LENGTH} can be encoded"
        )

    if length_encoding is None:
        length_encoding = 0 if size == 0 else (1 if size <= 0xFF else 2)
    elif length_encoding not in (0, 1, 2):
        raise InvalidArgumentError(f"Length encoding must be 0, 1 or 2, got {length_encoding}")
    elif size >= 1 << (8 * length_encoding):
        raise InvalidArgumentError(
            f"Preamble data is {size} bytes; does not fit {length_encoding} length byte(s)"
        )

    header = BLUEPRINT_PREFIX + bytes([(container.erc_version << 2) | length_encoding])
    return header + size.to_bytes(length_encoding, "big") + preamble + container.initcode
