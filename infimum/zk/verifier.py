"""
Groth16 proof verification capability.

The poll engine hands a proof, the ordered public inputs and a coordinator
verifying key to a ProofVerifier. SnarkjsVerifier is the production
implementation: it renders the byte-level key and proof as snarkjs JSON and
shells out to `snarkjs groth16 verify`.
"""

import json
import logging
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, List, Protocol, Sequence

from .field import FIELD_BYTES

logger = logging.getLogger(__name__)

G1_BYTES = 2 * FIELD_BYTES
G2_BYTES = 4 * FIELD_BYTES


class ProofVerifier(Protocol):
    def verify(self, proof, public_inputs: Sequence[int], verifying_key) -> bool:
        ...


def _coordinate(data: bytes, index: int) -> str:
    start = index * FIELD_BYTES
    return str(int.from_bytes(data[start:start + FIELD_BYTES], "big"))


def g1_to_json(point: bytes) -> List[str]:
    """G1 point x || y to snarkjs projective form"""
    if len(point) != G1_BYTES:
        raise ValueError(f"G1 point must be {G1_BYTES} bytes")
    return [_coordinate(point, 0), _coordinate(point, 1), "1"]


def g2_to_json(point: bytes) -> List[List[str]]:
    """G2 point x.c0 || x.c1 || y.c0 || y.c1 to snarkjs projective form"""
    if len(point) != G2_BYTES:
        raise ValueError(f"G2 point must be {G2_BYTES} bytes")
    return [
        [_coordinate(point, 0), _coordinate(point, 1)],
        [_coordinate(point, 2), _coordinate(point, 3)],
        ["1", "0"]
    ]


def verifying_key_to_json(verifying_key) -> Dict[str, Any]:
    return {
        "protocol": "groth16",
        "curve": "bn128",
        "nPublic": len(verifying_key.gamma_abc_g1) - 1,
        "vk_alpha_1": g1_to_json(verifying_key.alpha_g1),
        "vk_beta_2": g2_to_json(verifying_key.beta_g2),
        "vk_gamma_2": g2_to_json(verifying_key.gamma_g2),
        "vk_delta_2": g2_to_json(verifying_key.delta_g2),
        "IC": [g1_to_json(point) for point in verifying_key.gamma_abc_g1]
    }


def proof_to_json(proof) -> Dict[str, Any]:
    return {
        "protocol": "groth16",
        "curve": "bn128",
        "pi_a": g1_to_json(proof.pi_a),
        "pi_b": g2_to_json(proof.pi_b),
        "pi_c": g1_to_json(proof.pi_c)
    }


class SnarkjsVerifier:
    """Verify Groth16 proofs with the snarkjs command line tool"""

    def __init__(self, snarkjs_path: str = "snarkjs", timeout_seconds: int = 60):
        self.snarkjs_path = snarkjs_path
        self.timeout_seconds = timeout_seconds

    def verify(self, proof, public_inputs: Sequence[int], verifying_key) -> bool:
        start_time = time.time()

        if len(verifying_key.gamma_abc_g1) != len(public_inputs) + 1:
            logger.warning(
                f"Verifying key expects {len(verifying_key.gamma_abc_g1) - 1} public inputs, got {len(public_inputs)}")
            return False

        try:
            vkey = verifying_key_to_json(verifying_key)
            proof_data = proof_to_json(proof)
        except ValueError as e:
            logger.warning(f"Could not encode proof for verification: {e}")
            return False

        with tempfile.TemporaryDirectory() as temp_dir:
            temp_path = Path(temp_dir)
            vkey_file = temp_path / "verification_key.json"
            public_file = temp_path / "public.json"
            proof_file = temp_path / "proof.json"

            vkey_file.write_text(json.dumps(vkey))
            public_file.write_text(json.dumps([str(x) for x in public_inputs]))
            proof_file.write_text(json.dumps(proof_data))

            cmd = [
                self.snarkjs_path, 'groth16', 'verify',
                str(vkey_file),
                str(public_file),
                str(proof_file)
            ]

            try:
                result = subprocess.run(
                    cmd, capture_output=True, text=True, timeout=self.timeout_seconds)
            except (OSError, subprocess.TimeoutExpired) as e:
                logger.error(f"Verification failed: {e}")
                return False

        is_valid = result.returncode == 0 and "OK!" in result.stdout
        logger.info(
            f"Verified proof with {len(public_inputs)} public inputs in {time.time() - start_time:.3f}s: {'valid' if is_valid else 'invalid'}")
        return is_valid
