# ============================================================================
# QUEST RECONSTRUCTION
# ============================================================================
# STATUS: Domain service - Normalized rows to provider document
# PURPOSE: Rebuild the provider's nested quest shape from stored rows
# CREATED: 19 OCT 2026
# ============================================================================
"""
Quest Reconstruction

Inverse of services.quest_ingest. Given a CompleteQuest, renders the
nested object the provider would have served, so clients of the mirror
can read it as if it came from upstream.

Fields never stored come back as constants: ``user_status`` is null and
``targeted_content`` is empty. ``rewards_config.platforms`` holds only the
representative platform recorded at ingest. ``cta_config`` is emitted only
when the quest has a call to action.
"""

from typing import Any, Dict, Iterable, List

from core.models.quest import CompleteQuest, QuestAssets
from core.timestamps import format_timestamp


def _render_tasks(complete: CompleteQuest) -> Dict[str, Dict[str, Any]]:
    return {
        task.task_type: {
            "type": task.task_type,
            "target": task.target,
            "applications": task.applications,
            "external_ids": task.external_ids,
        }
        for task in complete.tasks
    }


def _render_rewards(complete: CompleteQuest) -> List[Dict[str, Any]]:
    return [
        {
            "type": reward.reward_type,
            "sku_id": reward.sku_id,
            "messages": {
                "name": reward.reward_name,
                "name_with_article": reward.reward_name_with_article,
                "redemption_instructions_by_platform": reward.redemption_instructions,
            },
            "orb_quantity": reward.orb_quantity,
        }
        for reward in complete.rewards
    ]


def _render_assets(complete: CompleteQuest) -> Dict[str, Any]:
    if complete.assets is None:
        return {name: None for name in QuestAssets.MEDIA_FIELDS}
    return complete.assets.media()


def representative_platform(complete: CompleteQuest) -> int:
    """Platform code recorded on the quest's rewards, 0 without rewards."""
    if complete.rewards:
        return complete.rewards[0].platform
    return 0


def reconstruct_quest(complete: CompleteQuest) -> Dict[str, Any]:
    """Render one stored quest in the provider's nested shape."""
    q = complete.quest

    config: Dict[str, Any] = {
        "id": q.id,
        "config_version": q.config_version,
        "starts_at": format_timestamp(q.starts_at),
        "expires_at": format_timestamp(q.expires_at),
        "features": [f.feature_id for f in complete.features],
        "application": {
            "id": q.application_id,
            "name": q.application_name,
            "link": q.application_link,
        },
        "assets": _render_assets(complete),
        "colors": {
            "primary": q.primary_color,
            "secondary": q.secondary_color,
        },
        "messages": {
            "quest_name": q.quest_name,
            "game_title": q.game_title,
            "game_publisher": q.game_publisher,
        },
        "task_config_v2": {
            "tasks": _render_tasks(complete),
            "join_operator": q.task_join_operator,
        },
        "rewards_config": {
            "assignment_method": q.reward_assignment_method,
            "rewards": _render_rewards(complete),
            "rewards_expire_at": format_timestamp(q.rewards_expire_at),
            "platforms": [representative_platform(complete)],
        },
        "share_policy": q.share_policy,
    }

    if q.has_cta:
        config["cta_config"] = {
            "link": q.cta_link,
            "button_label": q.cta_button_label,
        }

    return {
        "id": q.id,
        "config": config,
        "user_status": None,
        "targeted_content": [],
        "preview": q.preview,
    }


def reconstruct_catalog(quests: Iterable[CompleteQuest]) -> Dict[str, Any]:
    """Wrap reconstructed quests in the provider's top-level document."""
    return {"quests": [reconstruct_quest(cq) for cq in quests]}


__all__ = [
    "reconstruct_quest",
    "reconstruct_catalog",
    "representative_platform",
]
