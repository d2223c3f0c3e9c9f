def next_version(site_id):
    from pagebuilder.models.site_version import SiteVersion

    last = (
        SiteVersion.query
        .filter_by(site_id=site_id)
        .order_by(SiteVersion.version.desc())
        .first()
    )
    return (last.version + 1) if last else 1
