import logging
import requests
from typing import Optional



logger = logging.getLogger(__name__)


def _parse_reply(response : requests.Response) -> Optional[str]:
    # Raise an error for any failed responses
    response.raise_for_status()

    # Parse the JSON response
    result = response.json()

    # Check if the response was successful
    if result.get("status") == "success":
        return result.get("response")
    else:
        raise RuntimeError(f"Error from API: {result.get('message')}")


def message_api(
    text : str,
    mentioned : bool,
    chat_api_url : str) -> Optional[str]:
    """
    Sends a chat message to the MessageAPI, which learns it and may reply.

    Parameters
    ----------
    text : str
        The message.
    mentioned : bool
        Whether the bot was addressed directly (forces a reply).
    chat_api_url : str
        URL of the MessageAPI endpoint.

    Returns
    -------
    str
        The bot's reply.
    None
        The bot chose not to reply.
    """
    payload = {
        "text": text,
        "mentioned": mentioned}

    try:
        # Send the POST request to the API
        response = requests.post(
            chat_api_url,
            json=payload,
            timeout=10)

        return _parse_reply(response)

    except requests.RequestException as e:
        # Handle any connection or request exceptions
        raise RuntimeError(f"Failed to contact chat server: {e}")
    except ValueError as ve:
        # Handle JSON parsing errors
        raise RuntimeError(f"Failed to parse the response: {ve}")


def say_api(say_api_url : str) -> Optional[str]:
    """
    Asks the SayAPI for a sentence.

    Parameters
    ----------
    say_api_url : str
        URL of the SayAPI endpoint.

    Returns
    -------
    str
        A generated sentence.
    """
    try:
        response = requests.get(say_api_url, timeout=10)

        # Nothing learned yet is not a failure.
        if response.status_code == 404:
            logger.info("Chat server has nothing to say yet.")
            return None

        return _parse_reply(response)

    except requests.RequestException as e:
        raise RuntimeError(f"Failed to contact chat server: {e}")
    except ValueError as ve:
        raise RuntimeError(f"Failed to parse the response: {ve}")
