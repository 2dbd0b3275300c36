import hashlib

from Crypto.Random.random import randrange
from ecdsa import SECP256k1, SigningKey, VerifyingKey
from ecdsa.curves import UnknownCurveError, curve_by_name
from ecdsa.ellipticcurve import INFINITY, CurveFp, Point, PointJacobi
from ecdsa.errors import MalformedPointError
from ecdsa import numbertheory

from ring_errors import DomainError, FormatError, InvalidKeyError

SCALAR_BYTES = 32


def resolve_curve(curve):
    """
    Look up an ecdsa curve by name and check it can carry ring signatures:
    short Weierstrass form, cofactor 1, order fitting SCALAR_BYTES.
    """
    if isinstance(curve, str):
        try:
            curve = curve_by_name(curve)
        except UnknownCurveError as e:
            raise DomainError(f"Unknown curve {curve!r}") from e
    if not isinstance(curve.curve, CurveFp):
        raise DomainError(f"{curve.name} is not a short Weierstrass curve")
    # key images must live in the prime order group, no small subgroup
    if curve.curve.cofactor() != 1:
        raise DomainError(f"{curve.name} has cofactor {curve.curve.cofactor()}, need 1")
    if int(curve.order).bit_length() > SCALAR_BYTES * 8:
        raise DomainError(f"{curve.name} order does not fit {SCALAR_BYTES} byte scalars")
    return curve


class CurveContext:
    """
    Scalar and point algebra over a fixed prime order curve.

    The arithmetic itself is done by the ecdsa package; this class only pins
    the curve and converts keys between ecdsa objects, integers and bytes.

    Attributes:
        curve: ecdsa Curve object
        order: integer, group order n
        g: generator object (PointJacobi with precomputation)
    """
    def __init__(self, curve=SECP256k1):
        curve = resolve_curve(curve)
        self.curve = curve  # obj
        self.order = int(curve.order)  # int
        self.g = curve.generator  # obj
        self.point_bytes = curve.baselen + 1  # compressed encoding

    @property
    def name(self):
        return self.curve.name

    def random_scalar(self):
        return randrange(1, self.order)

    def public_key(self, private_key):
        return self.as_scalar(private_key) * self.g

    # to store in key vault
    def keygen(self):
        key = SigningKey.generate(curve=self.curve, hashfunc=hashlib.sha256)
        return key.privkey.secret_multiplier, key.verifying_key.pubkey.point

    def derive_keypair(self, seed: bytes):
        """Deterministic key pair from seed bytes, sk in [1, n-1]."""
        digest = hashlib.sha256(seed).digest()
        sk = int.from_bytes(digest, "big") % (self.order - 1) + 1
        return sk, sk * self.g

    def is_infinity(self, point):
        return point == INFINITY

    # encodes scalars as fixed width big endian
    def encode_scalar(self, x):
        if not isinstance(x, int) or not 0 <= x < self.order:
            raise InvalidKeyError("Scalar out of range")
        return x.to_bytes(SCALAR_BYTES, byteorder="big")

    def decode_scalar(self, data):
        if len(data) != SCALAR_BYTES:
            raise FormatError(f"Scalar must be {SCALAR_BYTES} bytes, got {len(data)}")
        x = int.from_bytes(data, byteorder="big")
        if x >= self.order:
            raise InvalidKeyError("Scalar out of range")
        return x

    def encode_point(self, point):
        # SEC1 encodes the point at infinity as a single zero byte
        if self.is_infinity(point):
            return b"\x00"
        return point.to_bytes("compressed")

    def decode_point(self, data):
        if len(data) != self.point_bytes:
            raise InvalidKeyError(
                f"Compressed point must be {self.point_bytes} bytes, got {len(data)}")
        if int.from_bytes(data[1:], "big") >= self.curve.curve.p():
            raise InvalidKeyError("Point x coordinate out of range")
        try:
            return PointJacobi.from_bytes(
                self.curve.curve, data,
                valid_encodings=("compressed",), order=self.order)
        except (MalformedPointError, numbertheory.Error) as e:
            raise InvalidKeyError(f"Not a point on {self.name}: {e}") from e

    def as_point(self, value):
        """Normalise a public key given as VerifyingKey, point, bytes or hex."""
        if isinstance(value, VerifyingKey):
            if value.curve != self.curve:
                raise InvalidKeyError(f"Key is not on {self.name}")
            return value.pubkey.point
        if isinstance(value, PointJacobi):
            if self.is_infinity(value):
                raise InvalidKeyError("Point at infinity is not a valid key")
            if value.curve() != self.curve.curve:
                raise InvalidKeyError(f"Point is not on {self.name}")
            return value
        if isinstance(value, Point):
            if self.is_infinity(value):
                raise InvalidKeyError("Point at infinity is not a valid key")
            if not self.curve.curve.contains_point(value.x(), value.y()):
                raise InvalidKeyError(f"Point is not on {self.name}")
            return PointJacobi.from_affine(value)
        if isinstance(value, str):
            value = hex_to_bytes(value, InvalidKeyError)
        if isinstance(value, (bytes, bytearray)):
            return self.decode_point(bytes(value))
        raise InvalidKeyError(f"Unsupported public key type {type(value).__name__}")

    def as_scalar(self, value):
        """Normalise a private key given as SigningKey, int, bytes or hex."""
        if isinstance(value, SigningKey):
            if value.curve != self.curve:
                raise InvalidKeyError(f"Key is not on {self.name}")
            return value.privkey.secret_multiplier
        if isinstance(value, str):
            value = hex_to_bytes(value, InvalidKeyError)
        if isinstance(value, (bytes, bytearray)):
            if len(value) != SCALAR_BYTES:
                raise InvalidKeyError(f"Private key must be {SCALAR_BYTES} bytes")
            value = int.from_bytes(value, byteorder="big")
        if isinstance(value, bool) or not isinstance(value, int):
            raise InvalidKeyError(f"Unsupported private key type {type(value).__name__}")
        if not 1 <= value < self.order:
            raise InvalidKeyError("Private key out of range")
        return value

    def same_point(self, a, b):
        return self.encode_point(a) == self.encode_point(b)


def hex_to_bytes(text, error=FormatError):
    if text[:2] in ("0x", "0X"):
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise error(f"Invalid hex string: {e}") from e
