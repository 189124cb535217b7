"""
A trainer that learns from one column of a CSV dataset.

Each row of the column is learned as a separate line, which suits datasets of
comments, reviews or posts stored one per row.
"""

import io
import logging

import pandas as pd


class CsvColumnTrainer:
    """
    The content of a CSV dataset.

    Args:
        content (str): Raw CSV content
        column (int or str): Position or name of the text column (default: 0)
        header (int or None): Row number holding the column names, or None
            if the dataset has no header
        logger (Logger, optional): Logger for reading events
    """

    def __init__(self, content, column=0, header=None, logger=None):
        self.content = content
        self.column = column
        self.header = header
        self.logger = logger or logging.getLogger(__name__)

    def read_lines(self):
        """
        Read the text column into a list of lines.

        Missing values are dropped, everything else is converted to a string.

        Returns:
            list: One line per row of the column

        Raises:
            KeyError: If the column does not exist in the dataset
        """
        if not self.content.strip():
            return []

        df = pd.read_csv(io.StringIO(self.content), header=self.header)

        if isinstance(self.column, int) and self.column not in df.columns:
            series = df.iloc[:, self.column]
        else:
            series = df[self.column]

        return series.dropna().astype(str).tolist()

    def source_train(self, generator, learn_params):
        """
        Train the generator on every row of the text column.

        Args:
            generator (MarkovChainGenerator): The generator to train
            learn_params (LearningParameters): How lines are cut into wordings
        """
        lines = self.read_lines()
        self.logger.info(f"Learning from CSV column {self.column!r} ({len(lines)} lines)")
        generator.train_lines(learn_params, lines)
