import logging

from flask import Flask, jsonify, request

from config import Config, setup_logging
from curve_context import CurveContext
from hash_oracle import HashOracle
from key_image_registry import MemoryKeyImageRegistry, SqliteKeyImageRegistry, key_image_tag
from proof_exporter import ProofExporter
from ring_curve_sig import RingSigner, RingVerifier
from ring_errors import AlreadyLinkedError, DomainError, FormatError, RingSignatureError
from ring_members import RingMemberProvider
from verifier_server import VerifierServer
from wire_format import (point_to_hex, proof_to_wire, ring_from_wire, ring_to_wire,
                         signature_from_wire, signature_to_wire)

logger = logging.getLogger(__name__)


def _json_body(*keys):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise FormatError("Request body must be a JSON object")
    missing = [k for k in keys if data.get(k) in (None, "")]
    if missing:
        raise FormatError(f"Missing required parameters: {', '.join(missing)}")
    return data


def _message(data):
    message = data["message"]
    if not isinstance(message, str):
        raise FormatError("message must be a string")
    return message.encode("utf-8")


def create_app(config=None, registry=None):
    config = config or Config.from_env()

    ctx = CurveContext(config.curve)
    oracle = HashOracle(ctx, config.hash_to_point)
    signer = RingSigner(ctx, oracle)
    verifier = RingVerifier(ctx, oracle)
    exporter = ProofExporter(verifier)
    provider = RingMemberProvider(ctx, min_size=config.pool_size)
    if registry is None:
        registry = MemoryKeyImageRegistry() if config.in_memory else SqliteKeyImageRegistry(config.database)
    server = VerifierServer(verifier, registry)

    app = Flask(__name__)

    def parse_signed(data):
        ring = ring_from_wire(ctx, data["ring"])
        return ring, _message(data), signature_from_wire(ctx, data["signature"])

    @app.errorhandler(AlreadyLinkedError)
    def already_linked(e):
        return jsonify({"error": "Key image already linked", "keyImage": e.tag, "type": type(e).__name__}), 409

    @app.errorhandler(RingSignatureError)
    def bad_request(e):
        logger.info("Rejected request: %s", e)
        return jsonify({"error": str(e), "type": type(e).__name__}), 400

    @app.route('/signature/generate', methods=['POST'])
    def generate():
        data = _json_body("signerKey", "message")
        ring_size = data.get("ringSize", config.ring_size)
        if isinstance(ring_size, bool) or not isinstance(ring_size, int):
            raise FormatError("ringSize must be an integer")
        if not 2 <= ring_size <= config.max_ring_size:
            raise DomainError(f"ringSize must be between 2 and {config.max_ring_size}")

        signer_key = data["signerKey"]
        if not isinstance(signer_key, str):
            raise FormatError("signerKey must be a hex string")
        message = _message(data)
        ring, _ = provider.select(ring_size, include=ctx.public_key(signer_key))
        signature = signer.sign(signer_key, ring, message)
        return jsonify({
            "ring": ring_to_wire(ctx, ring),
            "signature": signature_to_wire(ctx, signature),
            "keyImage": point_to_hex(ctx, signature.key_image),
        })

    @app.route('/signature/verify', methods=['POST'])
    def verify():
        ring, message, signature = parse_signed(_json_body("ring", "message", "signature"))
        return jsonify({"valid": server.verify_signature(ring, message, signature)})

    @app.route('/signature/link', methods=['POST'])
    def link():
        ring, message, signature = parse_signed(_json_body("ring", "message", "signature"))
        valid = server.link_signature(ring, message, signature)
        return jsonify({
            "valid": valid,
            "linked": valid,
            "keyImage": server.tag(signature),
        })

    @app.route('/signature/proof', methods=['POST'])
    def proof():
        ring, message, signature = parse_signed(_json_body("ring", "message", "signature"))
        return jsonify(proof_to_wire(ctx, exporter.derive_proof(ring, message, signature)))

    @app.route('/key-images/<key_image>', methods=['GET'])
    def key_image_status(key_image):
        tag = key_image_tag(key_image)
        linked_at = server.linked_at(tag)
        return jsonify({"keyImage": tag, "exists": linked_at is not None, "linkedAt": linked_at})

    return app


if __name__ == '__main__':
    config = Config.from_env()
    setup_logging(config.log_level)
    create_app(config).run(debug=True)
