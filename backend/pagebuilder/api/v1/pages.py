from flask import g, request, jsonify, current_app
from flask_jwt_extended import jwt_required
from pagebuilder.utils.decorators import clinic_access_required, roles_required
from pagebuilder.application.sites.load_site import load_site, find_site
from pagebuilder.application.sites.save_site import save_site
from pagebuilder.application.sites.publish_site import publish_site
from pagebuilder.application.sites.live_site import live_site
from pagebuilder.application.sites.upload_image import upload_image
from pagebuilder.models.site_version import SiteVersion
from pagebuilder.normalizers.version import normalize_version
from . import v1_bp

EDITOR_ROLES = ("owner", "admin")

# ------------------------
# Site document
# ------------------------

@v1_bp.route("/pages/<clinic_id>", methods=["GET"])
@jwt_required()
@clinic_access_required
def get_site(clinic_id):
    return jsonify(load_site(clinic_id=clinic_id))


@v1_bp.route("/pages/<clinic_id>/revision", methods=["GET"])
@jwt_required()
@clinic_access_required
def get_revision(clinic_id):
    record = find_site(clinic_id)
    return jsonify({"revision": record.revision if record else 0})


@v1_bp.route("/pages/<clinic_id>", methods=["PUT"])
@jwt_required()
@clinic_access_required
@roles_required(*EDITOR_ROLES)
def put_site(clinic_id):
    data = request.get_json(silent=True)

    if not isinstance(data, dict) or not isinstance(data.get("site"), dict):
        return jsonify({"error": "Body must be an object with a 'site' document"}), 400

    revision = data.get("revision", 0)
    if isinstance(revision, bool) or not isinstance(revision, int):
        return jsonify({"error": "'revision' must be an integer"}), 400

    result = save_site(
        clinic_id=clinic_id,
        actor_id=g.current_user_id,
        site_payload=data["site"],
        revision=revision,
    )
    current_app.logger.info("Clinic %s saved revision %s", clinic_id, result["revision"])
    return jsonify(result), 200


@v1_bp.route("/pages/<clinic_id>/publish", methods=["POST"])
@jwt_required()
@clinic_access_required
@roles_required(*EDITOR_ROLES)
def post_publish(clinic_id):
    result = publish_site(clinic_id=clinic_id, actor_id=g.current_user_id)
    current_app.logger.info(
        "Clinic %s published revision %s as version %s",
        clinic_id, result["revision"], result["version"],
    )
    return jsonify(result), 200


@v1_bp.route("/pages/<clinic_id>/live", methods=["GET"])
@jwt_required()
@clinic_access_required
def get_live_site(clinic_id):
    preview = request.args.get("preview", "false").lower() in ("1", "true", "yes")
    return jsonify(live_site(clinic_id=clinic_id, preview=preview))


@v1_bp.route("/pages/<clinic_id>/versions", methods=["GET"])
@jwt_required()
@clinic_access_required
@roles_required(*EDITOR_ROLES)
def list_versions(clinic_id):
    record = find_site(clinic_id)
    if not record:
        return jsonify([])

    versions = (
        SiteVersion.query
        .filter_by(site_id=record.id)
        .order_by(SiteVersion.version.desc())
        .all()
    )

    return jsonify([normalize_version(v) for v in versions])


# ------------------------
# Media
# ------------------------

@v1_bp.route("/uploads", methods=["POST"])
@jwt_required()
@clinic_access_required
@roles_required(*EDITOR_ROLES)
def post_upload():
    if "file" not in request.files:
        return jsonify({"error": "Multipart field 'file' is required"}), 400

    result = upload_image(clinic_id=g.current_clinic_id, file=request.files["file"])
    return jsonify(result), 201
