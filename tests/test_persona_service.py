"""
Unit tests for board member management and subscription limits
"""

import pytest

from boardroom.middleware.error_handler import LimitExceededError, NotFoundError
from boardroom.schemas.personas import PersonaCreate, PersonaUpdate
from boardroom.services import persona_service
from boardroom.services.personalities import CUSTOM_PROMPT_TEMPLATE, PERSONALITY_PROMPTS, PersonalityKind
from boardroom.services.subscriptions import can_share_media, persona_limit

from conftest import make_persona, make_user


class TestSubscriptionLimits:
    """Tier answers"""

    def test_free_tier(self, user):
        assert persona_limit(user) == 2
        assert can_share_media(user) is False

    def test_paid_tiers(self, db):
        for i, tier in enumerate(("premium", "pro", "Premium")):
            member = make_user(db, f"paid{i}@example.com", tier=tier)
            assert persona_limit(member) == 5
            assert can_share_media(member) is True


class TestCreatePersona:
    """Persona creation and the subscription cap"""

    def test_create_resolves_prompt(self, db, user):
        persona = persona_service.create_persona(
            db, user, PersonaCreate(name="Coach", personality="motivational_coach")
        )
        assert persona.personality == "motivational_coach"
        assert persona.system_prompt == PERSONALITY_PROMPTS[PersonalityKind.MOTIVATIONAL_COACH]
        assert persona.is_active is True

    def test_free_user_capped_at_two(self, db, user):
        persona_service.create_persona(db, user, PersonaCreate(name="One"))
        persona_service.create_persona(db, user, PersonaCreate(name="Two"))

        with pytest.raises(LimitExceededError) as exc_info:
            persona_service.create_persona(db, user, PersonaCreate(name="Three"))
        assert exc_info.value.details == {"limit": 2}
        assert len(persona_service.list_active(db, user.id)) == 2

    def test_deleted_personas_free_capacity(self, db, user):
        first = persona_service.create_persona(db, user, PersonaCreate(name="One"))
        persona_service.create_persona(db, user, PersonaCreate(name="Two"))
        persona_service.deactivate_persona(db, user, first.id)

        third = persona_service.create_persona(db, user, PersonaCreate(name="Three"))
        assert [p.name for p in persona_service.list_active(db, user.id)] == ["Two", third.name]

    def test_unknown_personality_defaults(self, db, user):
        persona = persona_service.create_persona(db, user, PersonaCreate(name="X", personality="???"))
        assert persona.personality == PersonalityKind.EMPATHETIC_COUNSELOR.value


class TestUpdatePersona:
    """Partial updates"""

    def test_custom_description_rewrites_prompt(self, db, user):
        persona = make_persona(db, user, "Sage")
        updated = persona_service.update_persona(
            db, user, persona.id, PersonaUpdate(custom_description="a retired sea captain")
        )
        assert updated.system_prompt == CUSTOM_PROMPT_TEMPLATE.format(description="a retired sea captain")

    def test_name_only_keeps_prompt(self, db, user):
        persona = make_persona(db, user, "Sage")
        prompt = persona.system_prompt
        updated = persona_service.update_persona(db, user, persona.id, PersonaUpdate(name="Sage II"))
        assert updated.name == "Sage II"
        assert updated.system_prompt == prompt

    def test_foreign_persona_is_not_found(self, db, user, premium_user):
        persona = make_persona(db, premium_user, "Theirs")
        with pytest.raises(NotFoundError):
            persona_service.update_persona(db, user, persona.id, PersonaUpdate(name="Mine"))


class TestInitializeDefaults:
    """Default board seeding"""

    def test_seeds_two_members(self, db, user):
        personas, created = persona_service.initialize_defaults(db, user)
        assert created is True
        assert [p.name for p in personas] == ["Maya", "Marcus"]

    def test_noop_when_board_exists(self, db, user):
        make_persona(db, user, "Existing")
        personas, created = persona_service.initialize_defaults(db, user)
        assert created is False
        assert [p.name for p in personas] == ["Existing"]

    def test_active_lookup_skips_inactive(self, db, user):
        active = make_persona(db, user, "Active")
        inactive = make_persona(db, user, "Gone")
        persona_service.deactivate_persona(db, user, inactive.id)

        found = persona_service.get_active_by_ids(db, user.id, [active.id, inactive.id])
        assert list(found) == [active.id]


class TestUpdateNulls:
    """Explicit nulls in a partial update"""

    def test_null_required_fields_are_ignored(self, db, user):
        persona = make_persona(db, user, "Sage")
        prompt = persona.system_prompt

        updated = persona_service.update_persona(
            db, user, persona.id, PersonaUpdate(personality=None, name=None)
        )
        assert updated.personality == PersonalityKind.WISE_MENTOR.value
        assert updated.name == "Sage"
        assert updated.system_prompt == prompt
