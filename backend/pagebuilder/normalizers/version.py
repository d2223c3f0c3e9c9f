def normalize_version(version):
    return {
        "id": version.id,
        "version": version.version,
        "revision": version.revision,
        "created_at": version.created_at.isoformat() if version.created_at else None,
        "created_by": version.created_by,
    }
