"""
Software platform authenticator for tests.

Implements the PlatformAuthenticator interface with ECDSA P-256 keys and
"none" attestation, producing WebAuthn JSON that py_webauthn verifies the
same way it verifies a browser response. Failure modes (cancellation,
missing hardware, counter manipulation) are switched on per test.
"""

import hashlib
import json
import os
import struct
from base64 import urlsafe_b64decode, urlsafe_b64encode
from dataclasses import dataclass, field

import cbor2
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.hashes import SHA256

from club_auth.webauthn import CeremonyError, CeremonyFailure

FLAGS_REGISTRATION = 0x45  # UP | UV | AT
FLAGS_ASSERTION = 0x05  # UP | UV


def b64url_encode(data: bytes) -> str:
    return urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(value: str) -> bytes:
    return urlsafe_b64decode(value + "=" * (-len(value) % 4))


def _encode_cose_public_key(public_key: ec.EllipticCurvePublicKey) -> bytes:
    """EC2 / ES256 / P-256 COSE_Key."""
    numbers = public_key.public_numbers()
    return cbor2.dumps({
        1: 2,
        3: -7,
        -1: 1,
        -2: numbers.x.to_bytes(32, "big"),
        -3: numbers.y.to_bytes(32, "big"),
    })


@dataclass
class StoredCredential:
    credential_id: bytes
    private_key: ec.EllipticCurvePrivateKey
    rp_id: str
    user_handle: bytes
    sign_count: int = 0


@dataclass
class SoftwareAuthenticator:
    """Resident-key platform authenticator living in memory.

    Attributes:
        origin: origin written into clientDataJSON
        available: answer of is_available()
        fail_with: when set, every ceremony returns this CeremonyError
        counter_step: increment applied to the signature counter per
            assertion; 0 models an authenticator without a counter
        selected: credential to use for assertions, newest when None
        next_credential_id: fixed id for the next created credential
    """
    origin: str
    available: bool = True
    fail_with: CeremonyError | None = None
    counter_step: int = 1
    selected: bytes | None = None
    next_credential_id: bytes | None = None
    credentials: dict[bytes, StoredCredential] = field(default_factory=dict)
    aaguid: bytes = field(default=b"\x00" * 16)
    calls: list[str] = field(default_factory=list)

    async def is_available(self) -> bool:
        self.calls.append("is_available")
        return self.available

    async def create(self, options: dict) -> dict | CeremonyFailure:
        self.calls.append("create")
        if self.fail_with is not None:
            return CeremonyFailure(self.fail_with, "failure requested by test")

        rp_id = options["rp"]["id"]
        for excluded in options.get("excludeCredentials") or []:
            if b64url_decode(excluded["id"]) in self.credentials:
                return CeremonyFailure(
                    CeremonyError.INVALID_STATE,
                    "The authenticator already contains one of the credentials",
                )

        private_key = ec.generate_private_key(ec.SECP256R1())
        credential_id = self.next_credential_id or os.urandom(32)
        self.credentials[credential_id] = StoredCredential(
            credential_id=credential_id,
            private_key=private_key,
            rp_id=rp_id,
            user_handle=b64url_decode(options["user"]["id"]),
        )

        client_data = self._client_data("webauthn.create", options["challenge"])
        auth_data = (
            hashlib.sha256(rp_id.encode("utf-8")).digest()
            + struct.pack(">BI", FLAGS_REGISTRATION, 0)
            + self.aaguid
            + struct.pack(">H", len(credential_id))
            + credential_id
            + _encode_cose_public_key(private_key.public_key())
        )
        attestation_object = cbor2.dumps({"fmt": "none", "attStmt": {}, "authData": auth_data})

        return {
            "id": b64url_encode(credential_id),
            "rawId": b64url_encode(credential_id),
            "type": "public-key",
            "response": {
                "clientDataJSON": b64url_encode(client_data),
                "attestationObject": b64url_encode(attestation_object),
                "transports": ["internal"],
            },
            "authenticatorAttachment": "platform",
            "clientExtensionResults": {},
        }

    async def get(self, options: dict) -> dict | CeremonyFailure:
        self.calls.append("get")
        if self.fail_with is not None:
            return CeremonyFailure(self.fail_with, "failure requested by test")

        stored = self._pick(options["rpId"])
        if stored is None:
            return CeremonyFailure(CeremonyError.NOT_ALLOWED, "No credential available")

        stored.sign_count += self.counter_step
        client_data = self._client_data("webauthn.get", options["challenge"])
        auth_data = (
            hashlib.sha256(stored.rp_id.encode("utf-8")).digest()
            + struct.pack(">BI", FLAGS_ASSERTION, stored.sign_count)
        )
        signature = stored.private_key.sign(
            auth_data + hashlib.sha256(client_data).digest(),
            ec.ECDSA(SHA256()),
        )

        return {
            "id": b64url_encode(stored.credential_id),
            "rawId": b64url_encode(stored.credential_id),
            "type": "public-key",
            "response": {
                "clientDataJSON": b64url_encode(client_data),
                "authenticatorData": b64url_encode(auth_data),
                "signature": b64url_encode(signature),
                "userHandle": b64url_encode(stored.user_handle),
            },
            "authenticatorAttachment": "platform",
            "clientExtensionResults": {},
        }

    @property
    def last_credential_id(self) -> bytes:
        return list(self.credentials)[-1]

    def set_sign_count(self, credential_id: bytes, value: int) -> None:
        """Rewind or advance the counter, e.g. to model a cloned key."""
        self.credentials[credential_id].sign_count = value

    def _pick(self, rp_id: str) -> StoredCredential | None:
        if self.selected is not None:
            return self.credentials.get(self.selected)
        candidates = [c for c in self.credentials.values() if c.rp_id == rp_id]
        return candidates[-1] if candidates else None

    def _client_data(self, kind: str, challenge: str) -> bytes:
        return json.dumps({
            "type": kind,
            "challenge": challenge,
            "origin": self.origin,
            "crossOrigin": False,
        }, separators=(",", ":")).encode("utf-8")
