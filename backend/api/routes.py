"""
HTTP API routes.
"""
import logging
from flask import jsonify, request

from errors import SessionNotFound

logger = logging.getLogger(__name__)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def register_routes(app, store, users, tiers=()):
    """Register all HTTP routes on the Flask app."""

    @app.get("/health")
    def health():
        return jsonify({"status": "ok", "store": store.name, "tiers": list(tiers)})

    # --------------------------------
    # Speech detection (session store)
    # --------------------------------

    @app.post("/api/speech-detection")
    def api_add_word():
        data = _json_body()
        if data is None:
            return jsonify({"success": False, "error": "Invalid request body"}), 400

        session_id = data.get("sessionId")
        word = data.get("word")
        if not session_id:
            return jsonify({"success": False, "error": "sessionId is required"}), 400
        if not word:
            return jsonify({"success": False, "error": "word is required"}), 400

        try:
            result = store.create_or_append_word(session_id, word)
            sess = result.session or store.get_session(session_id)
        except Exception as e:
            logger.exception("[API] saving word for session %s failed", session_id)
            return jsonify({"success": False, "error": str(e)}), 500

        return jsonify({
            "success": True,
            "message": "Session created successfully" if result.is_new_session else "Word added to session",
            "data": {
                "sessionId": session_id,
                "word": word,
                "wordsCount": result.word_count,
                "words": [w.to_dict() for w in sess.words],
                "isNewSession": result.is_new_session,
            },
        }), 201 if result.is_new_session else 200

    @app.get("/api/speech-detection")
    def api_get_sessions():
        session_id = request.args.get("sessionId")

        try:
            if not session_id:
                sessions = store.list_sessions()
                return jsonify({"success": True, "data": {"sessions": sessions, "count": len(sessions)}})
            sess = store.get_session(session_id)
        except SessionNotFound:
            return jsonify({"success": False, "error": "Session not found"}), 404
        except Exception as e:
            logger.exception("[API] reading sessions failed")
            return jsonify({"success": False, "error": str(e)}), 500
        return jsonify({"success": True, "data": sess.to_dict()})

    @app.delete("/api/speech-detection")
    def api_delete_session():
        session_id = request.args.get("sessionId")
        if not session_id:
            return jsonify({"success": False, "error": "sessionId is required"}), 400

        try:
            store.delete_session(session_id)
        except SessionNotFound:
            return jsonify({"success": False, "error": "Session not found"}), 404
        except Exception as e:
            logger.exception("[API] deleting session %s failed", session_id)
            return jsonify({"success": False, "error": str(e)}), 500
        return jsonify({"success": True, "message": "Session deleted successfully"})

    # --------------------------------
    # Users
    # --------------------------------

    @app.get("/api/users")
    def api_list_users():
        return jsonify({"success": True, "data": [u.to_dict() for u in users.list()]})

    @app.post("/api/users")
    def api_create_user():
        data = _json_body()
        if data is None:
            return jsonify({"success": False, "error": "Invalid request body"}), 400
        if not data.get("name") or not data.get("email"):
            return jsonify({"success": False, "error": "Name and email are required"}), 400

        user = users.create(data["name"], data["email"])
        return jsonify({"success": True, "data": user.to_dict()}), 201

    @app.get("/api/users/<int:user_id>")
    def api_get_user(user_id):
        user = users.get(user_id)
        if user is None:
            return jsonify({"success": False, "error": "User not found"}), 404
        return jsonify({"success": True, "data": user.to_dict()})

    @app.put("/api/users/<int:user_id>")
    def api_update_user(user_id):
        data = _json_body()
        if data is None:
            return jsonify({"success": False, "error": "Invalid request body"}), 400

        user = users.update(user_id, name=data.get("name"), email=data.get("email"))
        if user is None:
            return jsonify({"success": False, "error": "User not found"}), 404
        return jsonify({"success": True, "data": user.to_dict()})

    @app.delete("/api/users/<int:user_id>")
    def api_delete_user(user_id):
        user = users.delete(user_id)
        if user is None:
            return jsonify({"success": False, "error": "User not found"}), 404
        return jsonify({"success": True, "data": user.to_dict()})
