"""
Tests for field-level decryption of deployment configurations.

Covers:
- Round trip with the client-side envelope builder
- Browser wire format (byte arrays as lists of ints)
- Tamper rejection (ciphertext and nonce)
- All-or-nothing behaviour
- Algorithm/version, key and envelope format errors
- No plaintext in logs
"""

import base64
import logging
import os

import pytest
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from deployment.field_decryptor import (
    ENVELOPE_KEY,
    DecryptionFailedError,
    EncryptionEnvelope,
    EnvelopeFormatError,
    FieldCipherData,
    InvalidKeyError,
    UnsupportedEncryptionError,
    decrypt_configuration,
    encrypt_configuration,
    parse_envelope,
)


def browser_encrypt(key: bytes, plaintext: str) -> dict:
    """Encrypt one value the way the browser client serialises it."""
    nonce = os.urandom(12)
    ciphertext = AESGCM(key).encrypt(nonce, plaintext.encode('utf-8'), None)
    return {"encrypted": list(ciphertext), "iv": list(nonce)}


def browser_envelope(key: bytes, fields: dict, algorithm="AES-GCM", version="1.0") -> dict:
    return {
        "sessionKey": list(key),
        "encryptedFields": {name: browser_encrypt(key, value) for name, value in fields.items()},
        "algorithm": algorithm,
        "version": version,
    }


def flip_bit(b64_value: str, index: int = 0) -> str:
    raw = bytearray(base64.b64decode(b64_value))
    raw[index] ^= 0x01
    return base64.b64encode(bytes(raw)).decode('ascii')


@pytest.mark.unit
class TestRoundTrip:
    """Encrypting then decrypting restores the original configuration."""

    def test_round_trip_restores_encrypted_fields(self, session_key):
        original = {
            "domain": "cloud.example.com",
            "adminPassword": "Sup3r-Secret!",
            "dbPassword": "another pässword",
            "machinelearning": True,
            "smtpPort": 587,
        }

        encrypted = encrypt_configuration(original, fields=["adminPassword", "dbPassword"], key=session_key)

        assert "adminPassword" not in encrypted
        assert "dbPassword" not in encrypted
        assert ENVELOPE_KEY in encrypted

        decrypted = decrypt_configuration(encrypted)

        assert decrypted == original

    def test_unmarked_fields_are_untouched(self, session_key):
        original = {"domain": "x.example.com", "nested": {"a": [1, 2]}, "adminToken": "tok3n-Value!"}

        decrypted = decrypt_configuration(encrypt_configuration(original, fields=["adminToken"], key=session_key))

        assert decrypted["nested"] == {"a": [1, 2]}
        assert decrypted["domain"] == "x.example.com"

    def test_default_fields_are_sensitive_ones(self):
        encrypted = encrypt_configuration({"domain": "a.example.com", "adminPassword": "Passw0rd!"})

        assert encrypted["domain"] == "a.example.com"
        assert "adminPassword" not in encrypted
        assert list(encrypted[ENVELOPE_KEY]["encryptedFields"]) == ["adminPassword"]

    def test_nothing_to_encrypt_adds_no_envelope(self):
        config = {"domain": "a.example.com", "adminPassword": ""}

        assert encrypt_configuration(config) == config

    def test_browser_wire_format(self, session_key):
        config = {
            "domain": "vault.example.com",
            ENVELOPE_KEY: browser_envelope(session_key, {"adminToken": "vault-admin-T0ken!"}),
        }

        decrypted = decrypt_configuration(config)

        assert decrypted == {"domain": "vault.example.com", "adminToken": "vault-admin-T0ken!"}

    def test_input_configuration_not_modified(self, session_key):
        config = encrypt_configuration({"adminPassword": "Passw0rd!"}, key=session_key)
        snapshot = dict(config)

        decrypt_configuration(config)

        assert config == snapshot

    def test_explicit_envelope_argument(self, session_key):
        envelope = browser_envelope(session_key, {"dbPassword": "db-Passw0rd"})

        decrypted = decrypt_configuration({"domain": "a.example.com"}, envelope)

        assert decrypted == {"domain": "a.example.com", "dbPassword": "db-Passw0rd"}

    def test_empty_field_map_just_strips_envelope(self, session_key):
        config = {"port": 8080, ENVELOPE_KEY: browser_envelope(session_key, {})}

        assert decrypt_configuration(config) == {"port": 8080}


@pytest.mark.unit
class TestTamperRejection:
    """Any modification of ciphertext or nonce aborts decryption."""

    def test_flipped_ciphertext_bit(self, session_key):
        config = encrypt_configuration({"adminPassword": "Passw0rd!"}, key=session_key)
        field_data = config[ENVELOPE_KEY]["encryptedFields"]["adminPassword"]
        field_data["encrypted"] = flip_bit(field_data["encrypted"])

        with pytest.raises(DecryptionFailedError) as exc_info:
            decrypt_configuration(config)

        assert exc_info.value.field == "adminPassword"

    def test_flipped_authentication_tag_bit(self, session_key):
        config = encrypt_configuration({"adminPassword": "Passw0rd!"}, key=session_key)
        field_data = config[ENVELOPE_KEY]["encryptedFields"]["adminPassword"]
        field_data["encrypted"] = flip_bit(field_data["encrypted"], index=-1)

        with pytest.raises(DecryptionFailedError):
            decrypt_configuration(config)

    def test_flipped_nonce_bit(self, session_key):
        config = encrypt_configuration({"dbPassword": "Passw0rd!"}, key=session_key)
        field_data = config[ENVELOPE_KEY]["encryptedFields"]["dbPassword"]
        field_data["iv"] = flip_bit(field_data["iv"])

        with pytest.raises(DecryptionFailedError) as exc_info:
            decrypt_configuration(config)

        assert exc_info.value.field == "dbPassword"

    def test_wrong_key(self, session_key):
        config = encrypt_configuration({"adminPassword": "Passw0rd!"}, key=session_key)
        config[ENVELOPE_KEY]["sessionKey"] = base64.b64encode(AESGCM.generate_key(bit_length=256)).decode()

        with pytest.raises(DecryptionFailedError):
            decrypt_configuration(config)

    def test_one_bad_field_returns_nothing(self, session_key):
        """A valid field is not returned when another field fails."""
        config = encrypt_configuration(
            {"adminPassword": "Passw0rd!", "dbPassword": "Db-Passw0rd"},
            key=session_key
        )
        field_data = config[ENVELOPE_KEY]["encryptedFields"]["dbPassword"]
        field_data["encrypted"] = flip_bit(field_data["encrypted"])

        with pytest.raises(DecryptionFailedError) as exc_info:
            decrypt_configuration(config)

        assert exc_info.value.field == "dbPassword"
        assert "adminPassword" not in config

    def test_invalid_nonce_length(self, session_key):
        envelope = browser_envelope(session_key, {"adminPassword": "Passw0rd!"})
        envelope["encryptedFields"]["adminPassword"]["iv"] = [1, 2, 3]

        with pytest.raises(DecryptionFailedError):
            decrypt_configuration({}, envelope)

    def test_non_utf8_plaintext(self, session_key):
        nonce = os.urandom(12)
        ciphertext = AESGCM(session_key).encrypt(nonce, b'\xff\xfe\xfd', None)
        envelope = EncryptionEnvelope(
            session_key=session_key,
            algorithm="AES-GCM",
            version="1.0",
            fields={"adminPassword": FieldCipherData(ciphertext=ciphertext, nonce=nonce)},
        )

        with pytest.raises(DecryptionFailedError):
            decrypt_configuration({}, envelope)


@pytest.mark.unit
class TestEnvelopeChecks:
    """Envelope validation happens before any field is touched."""

    def test_unsupported_algorithm(self, session_key):
        envelope = browser_envelope(session_key, {"adminPassword": "Passw0rd!"}, algorithm="AES-CBC")

        with pytest.raises(UnsupportedEncryptionError):
            decrypt_configuration({ENVELOPE_KEY: envelope})

    def test_unsupported_version(self, session_key):
        envelope = browser_envelope(session_key, {"adminPassword": "Passw0rd!"}, version="2.0")

        with pytest.raises(UnsupportedEncryptionError):
            decrypt_configuration({ENVELOPE_KEY: envelope})

    def test_unsupported_algorithm_rejected_before_fields_are_read(self):
        """Garbage key and fields are never parsed when the algorithm is wrong."""
        envelope = {
            "sessionKey": "not base64 !!!",
            "encryptedFields": "garbage",
            "algorithm": "AES-CBC",
            "version": "1.0",
        }

        with pytest.raises(UnsupportedEncryptionError):
            parse_envelope(envelope)

    def test_constructed_envelope_with_wrong_algorithm(self, session_key):
        envelope = EncryptionEnvelope(session_key=session_key, algorithm="ChaCha20", version="1.0", fields={})

        with pytest.raises(UnsupportedEncryptionError):
            decrypt_configuration({}, envelope)

    @pytest.mark.parametrize("key_length", [0, 15, 31, 33])
    def test_invalid_key_length(self, key_length):
        envelope = {
            "sessionKey": list(os.urandom(key_length)),
            "encryptedFields": {},
            "algorithm": "AES-GCM",
            "version": "1.0",
        }

        with pytest.raises(InvalidKeyError):
            decrypt_configuration({}, envelope)

    @pytest.mark.parametrize("key_length", [16, 24, 32])
    def test_all_aes_key_sizes_accepted(self, key_length):
        key = os.urandom(key_length)
        envelope = browser_envelope(key, {"dbPassword": "Db-Passw0rd"})

        assert decrypt_configuration({}, envelope) == {"dbPassword": "Db-Passw0rd"}

    def test_invalid_base64(self):
        envelope = {"sessionKey": "***", "encryptedFields": {}, "algorithm": "AES-GCM", "version": "1.0"}

        with pytest.raises(EnvelopeFormatError):
            parse_envelope(envelope)

    def test_byte_list_out_of_range(self):
        envelope = {"sessionKey": [0, 256], "encryptedFields": {}, "algorithm": "AES-GCM", "version": "1.0"}

        with pytest.raises(EnvelopeFormatError):
            parse_envelope(envelope)

    def test_field_missing_iv(self, session_key):
        envelope = {
            "sessionKey": list(session_key),
            "encryptedFields": {"adminPassword": {"encrypted": [1, 2, 3]}},
            "algorithm": "AES-GCM",
            "version": "1.0",
        }

        with pytest.raises(EnvelopeFormatError):
            parse_envelope(envelope)

    def test_reserved_key_as_encrypted_field(self, session_key):
        envelope = browser_envelope(session_key, {ENVELOPE_KEY: "smuggled", "adminPassword": "Passw0rd!"})

        with pytest.raises(EnvelopeFormatError):
            parse_envelope(envelope)

    def test_reserved_key_in_constructed_envelope(self, session_key):
        nonce = os.urandom(12)
        envelope = EncryptionEnvelope(
            session_key=session_key,
            algorithm="AES-GCM",
            version="1.0",
            fields={ENVELOPE_KEY: FieldCipherData(
                ciphertext=AESGCM(session_key).encrypt(nonce, b"smuggled", None),
                nonce=nonce,
            )},
        )

        with pytest.raises(EnvelopeFormatError):
            decrypt_configuration({}, envelope)

    def test_envelope_not_an_object(self):
        with pytest.raises(EnvelopeFormatError):
            decrypt_configuration({ENVELOPE_KEY: "AES-GCM"})


@pytest.mark.unit
class TestNoSecretsLogged:

    def test_only_field_names_logged(self, session_key, caplog):
        caplog.set_level(logging.DEBUG)
        config = encrypt_configuration({"adminPassword": "Very-Secret-Value-1"}, key=session_key)

        decrypt_configuration(config)

        assert "adminPassword" in caplog.text
        assert "Very-Secret-Value-1" not in caplog.text

    def test_failure_message_names_field_only(self, session_key, caplog):
        caplog.set_level(logging.DEBUG)
        config = encrypt_configuration({"adminPassword": "Very-Secret-Value-1"}, key=session_key)
        field_data = config[ENVELOPE_KEY]["encryptedFields"]["adminPassword"]
        field_data["encrypted"] = flip_bit(field_data["encrypted"])

        with pytest.raises(DecryptionFailedError) as exc_info:
            decrypt_configuration(config)

        assert str(exc_info.value) == "Failed to decrypt field 'adminPassword'"
        assert "Very-Secret-Value-1" not in caplog.text
