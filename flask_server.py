# flask_server.py
import hmac
import logging
from typing import Optional

from flask import Flask, jsonify, redirect, request

from auth import AUTH_SUCCESS_MESSAGE, build_oauth, exchange_code, load_cached_client
from config import AppConfig
from errors import AuthMismatchError, RemoteAPIError, ShortcutError
from player import PlaybackCommander
from spot import Session

ROOT_MESSAGE = "app coming soon...."

logger = logging.getLogger("Flask_App_Thread")


def api_response(success: bool, message: Optional[str] = None, error: Optional[str] = None, status: int = 200):
    """The JSON envelope every /api/v1 endpoint answers with."""
    body = {"success": success}
    if message:
        body["message"] = message
    if error:
        body["error"] = error
    return jsonify(body), status


def create_flask_app(config: AppConfig, oauth, session: Session, commander: Optional[PlaybackCommander] = None) -> Flask:
    """Factory function to create and configure the Flask app."""
    app = Flask(__name__)
    api_token = config.require_api_token()
    commander = commander or PlaybackCommander(session)

    def request_token() -> str:
        token = request.args.get("token", "")
        if not token:
            header = request.headers.get("Authorization", "")
            token = header[len("Bearer "):] if header.startswith("Bearer ") else header
        return token

    def token_ok() -> bool:
        return hmac.compare_digest(request_token().encode(), api_token.encode())

    @app.route('/')
    def index():
        return ROOT_MESSAGE, 200, {"Content-Type": "text/plain"}

    @app.errorhandler(404)
    def not_found(_error):
        return "404 page not found", 404, {"Content-Type": "text/plain"}

    @app.route('/auth')
    def auth():
        if not token_ok():
            logger.warning("Rejected /auth request from %s", request.remote_addr)
            return "Unauthorized: Invalid or missing access token", 401, {"Content-Type": "text/plain"}
        return redirect(oauth.get_authorize_url(), code=307)

    @app.route('/callback')
    def callback():
        try:
            client = exchange_code(
                oauth,
                request.args.get("code"),
                request.args.get("state"),
                request.args.get("error"),
            )
        except AuthMismatchError as e:
            logger.error("Spotify authorization failed: %s", e)
            return str(e), 403, {"Content-Type": "text/plain"}

        session.replace(client)
        return AUTH_SUCCESS_MESSAGE, 200, {"Content-Type": "text/plain"}

    @app.route('/api/v1/play')
    def play():
        if not token_ok():
            return api_response(False, error="Invalid or missing access token", status=401)

        device = request.args.get("device", "")
        playlist = request.args.get("playlist", "")
        shuffle = request.args.get("shuffle", "").lower() == "true"

        if not playlist:
            return api_response(False, error="playlist parameter is required", status=400)

        try:
            message = commander.play(device, playlist, shuffle)
        except ShortcutError as e:
            logger.error("Play request failed: %s", e)
            return api_response(False, error=str(e), status=500)
        return api_response(True, message=message)

    @app.route('/api/v1/pause')
    def pause():
        if not token_ok():
            return api_response(False, error="Invalid or missing access token", status=401)

        try:
            message = commander.pause()
        except ShortcutError as e:
            logger.error("Pause request failed: %s", e)
            return api_response(False, error=str(e), status=500)
        return api_response(True, message=message)

    return app


def run_server(config: AppConfig) -> None:
    """
    Serves the HTTP API. A cached token is used when it still works;
    otherwise the operator authenticates through /auth.
    """
    config.require_api_token()
    oauth = build_oauth(config)
    session = Session()

    client = load_cached_client(oauth)
    if client is None:
        print("No Spotify token found. Visit /auth to authenticate.")
    else:
        try:
            user = client.current_user()
        except RemoteAPIError as e:
            logger.warning("Existing token rejected: %s", e)
            print("Existing token expired. Visit /auth to re-authenticate.")
        else:
            print(f"Authenticated as: {user.display_name}")
            session.replace(client)

    flask_app = create_flask_app(config, oauth, session)

    print(f"Starting API server on port {config.port}...")
    print("Endpoints:")
    print("  GET /api/v1/play?device=<name>&playlist=<name|id|url>&shuffle=<true|false>")
    print("  GET /api/v1/pause")
    flask_app.run(host="0.0.0.0", port=config.port, debug=False, threaded=True)
