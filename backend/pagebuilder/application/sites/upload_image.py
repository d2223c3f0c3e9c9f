from typing import Dict

from pagebuilder.utils.transaction import transactional
from pagebuilder.utils.media import save_file
from pagebuilder.utils.audit import log_action


def upload_image(*, clinic_id: str, file) -> Dict[str, str]:
    url = save_file(file)

    with transactional():
        log_action(
            action="media.upload",
            entity_type="media",
            entity_id=url.rsplit("/", 1)[-1],
            payload={"url": url},
            clinic_id=clinic_id,
        )

    return {"url": url}
