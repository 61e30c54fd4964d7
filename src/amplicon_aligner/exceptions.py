"""Custom exceptions for the amplicon aligner."""


class AlignerError(Exception):
    """Base exception for all aligner errors."""
    pass


class ParseError(AlignerError):
    """Exception raised while parsing the amplicon list."""

    def __init__(self, message: str, line_number: int = None, line_content: str = None):
        self.line_number = line_number
        self.line_content = line_content

        if line_number is not None:
            message = f"Line {line_number}: {message}"
        if line_content is not None:
            message = f"{message} (content: {line_content[:50]}...)"

        super().__init__(message)


class SynchronisationError(AlignerError):
    """Exception raised when the paired FASTQ files are out of step."""

    def __init__(self, message: str, read_name: str = None, fastq_file: str = None):
        self.read_name = read_name
        self.fastq_file = fastq_file

        if fastq_file is not None:
            message = f"{fastq_file}: {message}"
        if read_name is not None:
            message = f"{message} (read: {read_name})"

        super().__init__(message)


class AlignmentError(AlignerError):
    """Exception raised when the pairwise aligner cannot align its input."""

    def __init__(self, message: str, amplicon_id: str = None):
        self.amplicon_id = amplicon_id

        if amplicon_id is not None:
            message = f"Alignment failed for amplicon {amplicon_id}: {message}"

        super().__init__(message)


class OutputError(AlignerError):
    """Exception raised when an output file cannot be written."""

    def __init__(self, message: str, path: str = None):
        self.path = path

        if path is not None:
            message = f"Could not write {path}: {message}"

        super().__init__(message)


class ConfigurationError(AlignerError):
    """Exception raised for configuration errors."""

    def __init__(self, message: str, config_file: str = None, parameter: str = None):
        self.config_file = config_file
        self.parameter = parameter

        if config_file is not None:
            message = f"Configuration error in {config_file}: {message}"
        if parameter is not None:
            message = f"{message} (parameter: {parameter})"

        super().__init__(message)
