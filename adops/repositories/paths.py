"""Document paths of the media-plan hierarchy and lookup collections."""


def join_path(*segments: str) -> str:
    return "/".join(segments)


def split_path(path: str) -> tuple[str, str]:
    """Split a document path into ``(collection_path, doc_id)``."""
    collection_path, sep, doc_id = path.rpartition("/")
    if not sep or not collection_path or not doc_id:
        msg = f"Not a document path: {path!r}"
        raise ValueError(msg)
    return collection_path, doc_id


def campaigns_collection(client_id: str) -> str:
    return join_path("clients", client_id, "campaigns")


def campaign_path(client_id: str, campaign_id: str) -> str:
    return join_path(campaigns_collection(client_id), campaign_id)


def versions_collection(client_id: str, campaign_id: str) -> str:
    return join_path(campaign_path(client_id, campaign_id), "versions")


def onglets_collection(version_path: str) -> str:
    return join_path(version_path, "onglets")


def sections_collection(onglet_path: str) -> str:
    return join_path(onglet_path, "sections")


def tactiques_collection(section_path: str) -> str:
    return join_path(section_path, "tactiques")


def placements_collection(tactic_path: str) -> str:
    return join_path(tactic_path, "placements")


def creatifs_collection(placement_path: str) -> str:
    return join_path(placement_path, "creatifs")


def shortcode_path(shortcode_id: str) -> str:
    return join_path("shortcodes", shortcode_id)


def custom_codes_collection(client_id: str) -> str:
    return join_path("clients", client_id, "customCodes")


def taxonomy_path(client_id: str, taxonomy_id: str) -> str:
    return join_path("clients", client_id, "taxonomies", taxonomy_id)
