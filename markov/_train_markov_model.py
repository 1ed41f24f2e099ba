import logging
from markov.bot import Bot



logger = logging.getLogger(__name__)


def train_from_file(
    bot : Bot,
    dataset : str) -> int:
    """
    Teaches the bot every line of a text file, one utterance per line.

    Parameters
    ----------
    bot : Bot
        The bot to train.
    dataset : str
        Path to a UTF-8 text file.

    Returns
    -------
    int
        Number of non-empty lines learned.
    """
    learned = 0

    # Read the dataset line by line
    with open(dataset, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            bot.learn(line)
            learned += 1

    logger.info(f"Learned {learned} lines from {dataset}")
    return learned



if __name__ == "__main__":
    from utils import build_bot, load_config, setup_logging

    config = load_config("config.yaml")
    setup_logging(config["log_path"])

    # Train and save model
    bot = build_bot(config)
    train_from_file(bot, config["training_data"])

    # Generate and print text
    print(bot.say())
