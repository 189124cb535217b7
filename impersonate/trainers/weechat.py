"""
A trainer that learns from a WeeChat log.

WeeChat logs hold one message per line, prefixed by a date and a time:

    2020-04-13 10:00:00	alice	hi there
    2020-04-13 10:00:05	-->	bob (~bob@host) has joined #chan

Only the messages of a single author are kept, stripped from their date and
nickname.
"""

import logging
import re

LINE_REGEX = re.compile(r"(\d{4}-\d{2}-\d{2}\s+)?\d{2}:\d{2}:\d{2}\s+(.*)")

# Prefixes WeeChat uses for network, join and part notifications
NOISE_PREFIXES = ("--", "<--", "-->")


class WeechatLogTrainer:
    """
    The content of a WeeChat log.

    Args:
        author (str): Nickname of the author to mimic. An empty author keeps
            every message.
        content (str): Raw content of the log
        logger (Logger, optional): Logger for filtering events
    """

    def __init__(self, author, content, logger=None):
        self.author = author
        self.lines = content.splitlines()
        self.logger = logger or logging.getLogger(__name__)

    def filter_noise(self, lines):
        """Remove lines that are not timestamped messages, or that are WeeChat notifications."""
        kept = []
        for line in lines:
            match = LINE_REGEX.search(line)
            if match and not match.group(2).startswith(NOISE_PREFIXES):
                kept.append(line)
        return kept

    def cleanup(self, lines):
        """
        Remove dates and nicknames, dropping messages from other authors.

        Args:
            lines (list): Noise-free log lines

        Returns:
            list: Message contents of the author, without empty ones
        """
        cleaned = []
        ignored = 0

        for line in lines:
            match = LINE_REGEX.search(line)
            if not match:
                continue

            message = match.group(2)
            if message.startswith("@"):
                message = message[1:]

            if message.startswith(self.author):
                content = message[len(self.author):].strip()
                if content:
                    cleaned.append(content)
            else:
                ignored += 1
                self.logger.debug(f"Ignoring line: {message}")

        self.logger.info("WeeChat log cleaned", extra={
            "metrics": {
                "author": self.author,
                "kept_lines": len(cleaned),
                "ignored_lines": ignored,
            }
        })
        return cleaned

    def cleaned_lines(self):
        """Return the author's messages, ready to be learned."""
        return self.cleanup(self.filter_noise(self.lines))

    def source_train(self, generator, learn_params):
        """
        Train the generator on every message of the author.

        Args:
            generator (MarkovChainGenerator): The generator to train
            learn_params (LearningParameters): How lines are cut into wordings
        """
        lines = self.cleaned_lines()
        self.logger.info(f"Learning from WeeChat log ({len(lines)} lines)")
        generator.train_lines(learn_params, lines)
