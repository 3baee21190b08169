import sys
import os
import threading

from waitress import serve
from dotenv import load_dotenv
from flask import Flask, jsonify

from bumpp import bot
from bumpp.repository import Repository
from bumpp.storage import JsonStorage

DEFAULT_BOT_USERNAME = "BumppBot"

DEFAULT_DATA_DIR = "data"


def create_health_app(repository: Repository) -> Flask:
    app = Flask(__name__)

    @app.route("/", methods=["GET"])
    def health_check():
        one_time, recurring = repository.count()
        return jsonify(status="UP", one_time=one_time, recurring=recurring), 200

    return app


def run_flask_in_background(repository: Repository) -> None:
    port = 80 if len(sys.argv) == 1 else int(sys.argv[1])
    app = create_health_app(repository)
    run_serve = lambda: serve(app, host="0.0.0.0", port=port)
    threading.Thread(target=run_serve, daemon=True).start()


def run_bot_polling(repository: Repository) -> None:
    token = os.environ["TOKEN"]
    bot_username = os.environ.get("BOT_USERNAME", DEFAULT_BOT_USERNAME)

    developer_chat_id = os.environ.get("DEVELOPER_CHAT_ID")
    developer_chat_id = int(developer_chat_id) if developer_chat_id else None

    bot.run_polling(token, repository, bot_username, developer_chat_id)


def main() -> None:
    # load environment variables
    load_dotenv()

    storage = JsonStorage(os.environ.get("DATA_DIR", DEFAULT_DATA_DIR))
    repository = Repository(storage)

    run_flask_in_background(repository)
    run_bot_polling(repository)


if __name__ == "__main__":
    main()
