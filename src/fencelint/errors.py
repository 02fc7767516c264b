"""Exception hierarchy for fencelint.

Only conditions that make a run impossible are raised as exceptions.
Everything wrong *inside* a document is reported as a Finding instead.
"""


class FencelintError(Exception):
    """Base class for fatal fencelint errors."""


class InputError(FencelintError):
    """An input path is missing, unreadable or not decodable."""


class ConfigError(FencelintError):
    """The configuration file or an allow-list file is invalid."""


class FrontmatterError(FencelintError):
    """Frontmatter is present but cannot be decoded.

    Raised by the frontmatter codec and recovered by the document loader,
    which turns it into a MalformedFrontmatter finding.
    """

    def __init__(self, message: str, line: int = 1):
        super().__init__(message)
        self.line = line
