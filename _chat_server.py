from flask import Flask, current_app, request
from flask_restful import Api, Resource
import logging
import random
import threading
from typing import Optional, Tuple
from markov.bot import Bot
from markov.errors import NoDataError, StorageError
from utils import HealthCheckAPI, build_bot, load_config, setup_logging



# Initialize Flask application and RESTful API.
app = Flask(__name__)
api = Api(app)

logger = logging.getLogger(__name__)


# The chain has a single writer: one bot call at a time.
BOT_LOCK = threading.Lock()

# Decides whether an unmentioned message gets a reply.
REPLY_RNG = random.SystemRandom()


def strip_mention(
    text : str,
    bot_name : str) -> Tuple[str, bool]:
    """
    Removes a leading `@bot_name` from a message.

    Parameters
    ----------
    text : str
        The raw message.
    bot_name : str
        The name the bot answers to.

    Returns
    -------
    tuple
        The message without the mention, and whether it was present.
    """
    mention = f"@{bot_name}"
    stripped = text.lstrip()
    if not stripped.startswith(mention):
        return text, False

    # The mention must be a whole word.
    if stripped == mention or stripped[len(mention):][:1].isspace():
        return stripped[len(mention):], True

    return text, False


def should_reply(
    mentioned : bool,
    verbosity : float) -> bool:
    """
    Always reply when mentioned, otherwise with probability `verbosity`.
    """
    if mentioned:
        return True

    return REPLY_RNG.random() < verbosity


def handle_message(
    bot : Bot,
    text : str,
    reply : bool) -> Optional[str]:
    """
    Learns the message and, if asked to, replies to it.

    Parameters
    ----------
    bot : Bot
        The bot to use.
    text : str
        The message, mention already removed.
    reply : bool
        Whether a reply is wanted.

    Returns
    -------
    str
        The reply.
    None
        No reply was wanted, or there is nothing to reply with yet.
    """
    with BOT_LOCK:
        bot.learn(text)

        if not reply:
            return None

        try:
            return bot.reply(text)

        except NoDataError:
            logger.info("Nothing learned yet, staying silent.")
            return None


class MessageAPI(Resource):
    """
    API Resource receiving chat messages.
    """

    def post(self):
        """
        Learn a message and maybe reply to it.

        Expected JSON body:
        {
            "text": "string",       # The message
            "mentioned": bool       # Optional, forces a reply
        }

        Returns:
        -------
        JSON:
            - status: "success" or "error"
            - response: The reply, or null
            - message: Error message (if any failure occurs)
        """
        try:
            # Parse incoming JSON request.
            data = request.get_json(silent=True)
            if not isinstance(data, dict):
                data = {}

            text = data.get("text")
            mentioned = data.get("mentioned") is True

            # Validate required fields.
            if not text or not isinstance(text, str):
                return {
                    "status": "error",
                    "message": "'text' parameter is required."
                }, 400

            text, was_mentioned = strip_mention(
                text,
                current_app.config["BOT_NAME"])
            mentioned = mentioned or was_mentioned

            response = handle_message(
                bot=current_app.config["BOT"],
                text=text,
                reply=should_reply(mentioned, current_app.config["VERBOSITY"]))

            if response is not None:
                logger.info(f"    > {response}")

            return {
                "status": "success",
                "response": response
            }

        except StorageError as e:
            logger.error(f"StorageError: {e}")
            return {
                "status": "error",
                "message": str(e)
            }, 500


class SayAPI(Resource):
    """
    API Resource producing a sentence that answers nothing in particular.
    """

    def get(self):
        try:
            with BOT_LOCK:
                response = current_app.config["BOT"].say()

            return {
                "status": "success",
                "response": response
            }

        except NoDataError as e:
            return {
                "status": "error",
                "message": str(e)
            }, 404

        except StorageError as e:
            logger.error(f"StorageError: {e}")
            return {
                "status": "error",
                "message": str(e)
            }, 500


# Add the resources to the Flask app.
api.add_resource(MessageAPI, "/message")
api.add_resource(SayAPI, "/say")
api.add_resource(HealthCheckAPI, "/health")



if __name__ == "__main__":

    config = load_config("config.yaml")
    setup_logging(config["log_path"])

    app.config["BOT"] = build_bot(config)
    app.config["VERBOSITY"] = config["verbosity"]
    app.config["BOT_NAME"] = config["bot_name"]

    # Run the chat server.
    app.run(
        host=config["host"],
        port=config["port"],
        debug=False,
        use_reloader=False)
