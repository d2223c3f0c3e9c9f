from pagebuilder.domain.exceptions import SaveConflict


def enforce_revision(record, sent_revision):
    """
    Optimistic locking on the document revision counter.
    Raises ``SaveConflict`` when the client saved against an older revision.
    """
    current = record.revision if record is not None else 0
    if sent_revision != current:
        raise SaveConflict(sent_revision, current)
