import logging
import sys
from typing import Dict, Any, TextIO
from utils import load_config, setup_logging
from utils_apis import message_api, say_api



logger = logging.getLogger(__name__)
END_SIGN = "------------------------------------------"


def chat_loop(
    config : Dict[str, Any],
    stdin : TextIO = sys.stdin,
    stdout : TextIO = sys.stdout) -> int:
    """
    Sends every line typed on stdin to the chat server and prints replies.

    Type `!say` for a random sentence, `q` or EOF to quit.

    Parameters
    ----------
    config : dict
        Loaded config.yaml.
    stdin : TextIO
        Where messages are read from.
    stdout : TextIO
        Where replies are written to.

    Returns
    -------
    int
        Number of replies received.
    """
    replies = 0

    for line in stdin:
        text = line.strip()
        if text.lower() == "q":
            break

        # Skip empty lines.
        if not text:
            continue

        try:
            # Ask for a sentence without teaching anything.
            if text == "!say":
                reply = say_api(say_api_url=config["say_api_url"])

            else:
                mentioned = text.split()[:1] == [f"@{config['bot_name']}"]
                reply = message_api(
                    text=text,
                    mentioned=mentioned,
                    chat_api_url=config["chat_api_url"])

        except RuntimeError as e:
            logger.warning("Error during chat!")
            logger.warning(e)
            continue

        if reply:
            replies += 1
            stdout.write(f"{config['bot_name']}: {reply}\n")
            stdout.flush()

        logger.info(END_SIGN)

    return replies



if __name__ == "__main__":

    config = load_config("config.yaml")
    setup_logging("logs/main.log")

    chat_loop(config)
