"""
Field-level decryption for deployment configurations.

The browser client encrypts sensitive configuration fields with a fresh
AES-GCM session key before submission and attaches the key material under
the reserved '_encryption' configuration key:

    {
        "sessionKey": <bytes>,
        "algorithm": "AES-GCM",
        "version": "1.0",
        "encryptedFields": {
            "adminPassword": {"encrypted": <ciphertext||tag>, "iv": <nonce>}
        }
    }

Byte values arrive either as base64 strings or as JSON arrays of integers
(what the browser produces from a Uint8Array).

Decryption is all-or-nothing: if any field fails authentication, no field is
returned. Only field names are ever logged.

Usage:
    envelope = parse_envelope(configuration['_encryption'])
    plaintext_config = decrypt_configuration(configuration, envelope)
"""

import base64
import binascii
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from utils.redaction import is_sensitive_field

logger = logging.getLogger(__name__)

ENVELOPE_KEY = '_encryption'
SUPPORTED_ALGORITHM = 'AES-GCM'
SUPPORTED_VERSION = '1.0'

# Browser client uses 256-bit keys and 96-bit nonces
SESSION_KEY_BYTES = 32
NONCE_BYTES = 12


class DecryptionError(Exception):
    """Base class for failures that make a configuration unreadable"""
    pass


class UnsupportedEncryptionError(DecryptionError):
    """Envelope declares an algorithm/version other than AES-GCM 1.0"""
    pass


class InvalidKeyError(DecryptionError):
    """Session key is malformed for AES-GCM"""
    pass


class EnvelopeFormatError(DecryptionError):
    """Envelope is not structured as expected"""
    pass


class DecryptionFailedError(DecryptionError):
    """Authenticated decryption failed for a specific field"""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Failed to decrypt field '{field}'")


@dataclass(frozen=True)
class FieldCipherData:
    ciphertext: bytes
    nonce: bytes


@dataclass(frozen=True)
class EncryptionEnvelope:
    session_key: bytes
    algorithm: str
    version: str
    fields: Mapping[str, FieldCipherData]


def _decode_bytes(value: Any, what: str) -> bytes:
    """Decode a wire byte value (base64 string or list of ints) into bytes."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)

    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            raise EnvelopeFormatError(f"{what} is not valid base64")

    if isinstance(value, list):
        if not all(isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in value):
            raise EnvelopeFormatError(f"{what} must be a list of byte values (0-255)")
        return bytes(value)

    raise EnvelopeFormatError(f"{what} must be base64 or a list of byte values")


def parse_envelope(raw: Any) -> EncryptionEnvelope:
    """
    Build an EncryptionEnvelope from its wire representation.

    The algorithm/version pair is checked before anything else in the
    envelope is read, so an unsupported envelope is rejected untouched.

    Raises:
        UnsupportedEncryptionError: algorithm/version is not AES-GCM 1.0
        EnvelopeFormatError: structure or byte encoding is invalid
    """
    if isinstance(raw, EncryptionEnvelope):
        return raw

    if not isinstance(raw, dict):
        raise EnvelopeFormatError("Encryption metadata must be an object")

    algorithm = raw.get('algorithm')
    version = raw.get('version')
    if algorithm != SUPPORTED_ALGORITHM or version != SUPPORTED_VERSION:
        raise UnsupportedEncryptionError("Unsupported encryption version or algorithm")

    if 'sessionKey' not in raw:
        raise EnvelopeFormatError("Encryption metadata is missing 'sessionKey'")
    session_key = _decode_bytes(raw['sessionKey'], 'sessionKey')

    encrypted_fields = raw.get('encryptedFields', {})
    if encrypted_fields is None:
        encrypted_fields = {}
    if not isinstance(encrypted_fields, dict):
        raise EnvelopeFormatError("'encryptedFields' must be an object")

    fields = {}
    for field_name, data in encrypted_fields.items():
        if field_name == ENVELOPE_KEY:
            raise EnvelopeFormatError(f"'{ENVELOPE_KEY}' cannot be an encrypted field")
        if not isinstance(data, dict) or 'encrypted' not in data or 'iv' not in data:
            raise EnvelopeFormatError(f"Encrypted field '{field_name}' must contain 'encrypted' and 'iv'")
        fields[field_name] = FieldCipherData(
            ciphertext=_decode_bytes(data['encrypted'], f"'{field_name}' ciphertext"),
            nonce=_decode_bytes(data['iv'], f"'{field_name}' iv"),
        )

    return EncryptionEnvelope(
        session_key=session_key,
        algorithm=algorithm,
        version=version,
        fields=fields,
    )


def decrypt_configuration(
    configuration: Dict[str, Any],
    envelope: Optional[Any] = None
) -> Dict[str, Any]:
    """
    Recover plaintext for the encrypted fields of a configuration.

    Args:
        configuration: Configuration as submitted (may contain '_encryption')
        envelope: EncryptionEnvelope or its wire dict. Defaults to the value
            stored under '_encryption' in the configuration.

    Returns:
        New configuration without '_encryption', with every encrypted field
        replaced by its UTF-8 plaintext. The input is not modified.

    Raises:
        UnsupportedEncryptionError: Unsupported algorithm/version
        InvalidKeyError: Session key has the wrong length or type
        DecryptionFailedError: A field failed authentication (nothing is returned)
        EnvelopeFormatError: Envelope is structurally invalid
    """
    if envelope is None:
        if ENVELOPE_KEY not in configuration:
            raise EnvelopeFormatError("Configuration carries no encryption metadata")
        envelope = configuration[ENVELOPE_KEY]

    envelope = parse_envelope(envelope)

    # Envelopes passed in as objects skip parse_envelope checks
    if envelope.algorithm != SUPPORTED_ALGORITHM or envelope.version != SUPPORTED_VERSION:
        raise UnsupportedEncryptionError("Unsupported encryption version or algorithm")
    if ENVELOPE_KEY in envelope.fields:
        raise EnvelopeFormatError(f"'{ENVELOPE_KEY}' cannot be an encrypted field")

    try:
        aesgcm = AESGCM(envelope.session_key)
    except (ValueError, TypeError):
        raise InvalidKeyError("Session key is not a valid AES-GCM key (expected 128, 192 or 256 bits)")

    decrypted = {}
    for field_name, cipher_data in envelope.fields.items():
        try:
            plaintext = aesgcm.decrypt(cipher_data.nonce, cipher_data.ciphertext, None)
            decrypted[field_name] = plaintext.decode('utf-8')
        except (InvalidTag, ValueError, TypeError):
            # ValueError covers invalid nonce lengths and non-UTF-8 plaintext
            logger.warning(f"Decryption failed for field: {field_name}")
            raise DecryptionFailedError(field_name) from None

    result = {k: v for k, v in configuration.items() if k != ENVELOPE_KEY}
    result.update(decrypted)

    if decrypted:
        logger.info(f"Decrypted {len(decrypted)} field(s): {', '.join(sorted(decrypted))}")

    return result


def encrypt_configuration(
    configuration: Dict[str, Any],
    fields: Optional[Iterable[str]] = None,
    key: Optional[bytes] = None
) -> Dict[str, Any]:
    """
    Encrypt sensitive fields the same way the browser client does.

    Only non-empty string values are encrypted; their plaintext is removed from
    the returned configuration and an '_encryption' envelope is attached.
    Byte values are emitted as base64 strings.

    Args:
        configuration: Plaintext configuration
        fields: Field names to encrypt. Defaults to fields recognised as sensitive.
        key: Session key (defaults to a fresh 256-bit key)

    Returns:
        New configuration; unchanged copy if nothing was encrypted
    """
    if fields is None:
        fields = [name for name in configuration if is_sensitive_field(name)]
    if key is None:
        key = AESGCM.generate_key(bit_length=SESSION_KEY_BYTES * 8)

    aesgcm = AESGCM(key)
    prepared = dict(configuration)
    encrypted_fields = {}

    for field_name in fields:
        value = prepared.get(field_name)
        if not isinstance(value, str) or not value:
            continue

        nonce = os.urandom(NONCE_BYTES)
        ciphertext = aesgcm.encrypt(nonce, value.encode('utf-8'), None)
        encrypted_fields[field_name] = {
            'encrypted': base64.b64encode(ciphertext).decode('ascii'),
            'iv': base64.b64encode(nonce).decode('ascii'),
        }
        del prepared[field_name]

    if encrypted_fields:
        prepared[ENVELOPE_KEY] = {
            'sessionKey': base64.b64encode(key).decode('ascii'),
            'encryptedFields': encrypted_fields,
            'algorithm': SUPPORTED_ALGORITHM,
            'version': SUPPORTED_VERSION,
        }

    return prepared
