def story_json(s):
    return {
        "id": s.id,
        "org_id": s.organization_id,
        "class_id": s.classroom_id,
        "class_name": s.classroom.name if s.classroom_id else None,
        "author_id": s.author_id,
        "author_name": (s.author.full_name or s.author.email) if s.author_id else None,
        "title": s.title,
        "caption": s.caption,
        "is_public": s.is_public,
        "expires_at": s.expires_at,
        "created_at": s.created_at,
        "updated_at": s.updated_at,
        "deleted_at": s.deleted_at,
    }


def item_json(i):
    return {
        "id": i.id,
        "story_id": i.story_id,
        "order_index": i.order_index,
        "url": i.url or None,
        "duration_ms": i.duration_ms,
        "caption": i.caption,
        "mime_type": i.mime_type,
        "created_at": i.created_at,
    }
