"""
A trainer that learns from an irssi log.

irssi logs prefix every message with a time and wrap the nickname in angle
brackets, with a mode character when the user has one:

    --- Log opened Mon Apr 13 10:00:00 2020
    10:00 <@alice> hi there
    10:01 -!- bob [~bob@host] has joined #chan
    10:02 < carol> hello
"""

import logging
import re

LINE_REGEX = re.compile(r"^\d{2}:\d{2}(?::\d{2})?\s+(.*)$")

# Status (join, part, quit, topic) and action lines
NOISE_PREFIXES = ("-!-", "*")

NICK_MODES = "@+%"


class IrssiLogTrainer:
    """
    The content of an irssi log.

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

    @staticmethod
    def _message(line):
        match = LINE_REGEX.match(line)
        if not match:
            return None
        message = match.group(1)
        if message.startswith(NOISE_PREFIXES):
            return None
        return message

    @staticmethod
    def _split_nick(message):
        # "<@alice> hi" -> ("alice", "hi")
        if not message.startswith("<"):
            return None, message
        nick, sep, text = message[1:].partition(">")
        if not sep:
            return None, message
        nick = nick.strip()
        if nick and nick[0] in NICK_MODES:
            nick = nick[1:]
        return nick, text.strip()

    def cleaned_lines(self):
        """
        Return the author's messages, stripped from their time and nickname.

        Returns:
            list: Non-empty message contents of the author
        """
        cleaned = []
        ignored = 0

        for line in self.lines:
            message = self._message(line)
            if message is None:
                continue

            nick, content = self._split_nick(message)
            if nick is None or not nick.startswith(self.author):
                ignored += 1
                self.logger.debug(f"Ignoring line: {message}")
                continue

            if content:
                cleaned.append(content)

        self.logger.info("irssi log cleaned", extra={
            "metrics": {
                "author": self.author,
                "kept_lines": len(cleaned),
                "ignored_lines": ignored,
            }
        })
        return cleaned

    def source_train(self, generator, learn_params):
        """
        Train the generator on every message of the author.

        Args:
            generator (MarkovChainGenerator): The generator to train
            learn_params (LearningParameters): How lines are cut into wordings
        """
        lines = self.cleaned_lines()
        self.logger.info(f"Learning from irssi log ({len(lines)} lines)")
        generator.train_lines(learn_params, lines)
