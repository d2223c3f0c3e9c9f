class InvariantViolation(Exception):
    """
    Raised when a document breaks a structural rule (section ordering,
    home page uniqueness, slug uniqueness).

    These are programmer errors: every mutation is expected to leave the
    document well-formed.
    """
