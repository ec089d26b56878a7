"""
Tests for input validation
==========================

Tests for:
- Disputant registration rules
- Case filing rules (required fields, court/police info, proof)
- Workflow action bodies (witnesses, mediation, resolution, status)
"""

from datetime import timezone

import pytest

from resolveit.cases import validation
from resolveit.core.exceptions import ValidationError
from resolveit.db.models.case import CaseStatus, CaseType
from resolveit.db.models.user import Gender

from tests.conftest import make_case_payload, make_user_payload

PARTY_ID = "5f0c2f1e-8a3b-4c1d-9e2f-0a1b2c3d4e5f"


def messages(result) -> list[str]:
    return [e.message for e in result.errors]


# =============================================================================
# Users
# =============================================================================

class TestUserValidation:

    def test_valid_user_is_normalized(self):
        result = validation.validate_user_input(make_user_payload())
        assert result.ok
        record = result.record
        assert record.gender is Gender.FEMALE
        assert record.address.city == "Hyderabad"
        assert record.photo is None

    @pytest.mark.parametrize("missing", ["name", "age", "gender", "address", "email", "phone"])
    def test_missing_field_rejected(self, missing):
        payload = make_user_payload()
        del payload[missing]
        result = validation.validate_user_input(payload)
        assert not result.ok
        assert "All fields are required." in messages(result)

    @pytest.mark.parametrize("age", [0, -3, "34", 2.5, True])
    def test_age_must_be_positive_integer(self, age):
        result = validation.validate_user_input(make_user_payload(age=age))
        assert "Age must be a positive number." in messages(result)

    def test_unknown_gender_rejected(self):
        result = validation.validate_user_input(make_user_payload(gender="Robot"))
        assert "Gender must be Male, Female, or Other." in messages(result)

    def test_non_string_gender_does_not_crash(self):
        result = validation.validate_user_input(make_user_payload(gender=["Male"]))
        assert "Gender must be Male, Female, or Other." in messages(result)

    def test_incomplete_address_rejected(self):
        result = validation.validate_user_input(
            make_user_payload(address={"street": "1 Road", "city": "Pune"})
        )
        assert "Complete address is required." in messages(result)

    def test_numeric_zip_accepted(self):
        result = validation.validate_user_input(
            make_user_payload(address={"street": "1 Road", "city": "Pune", "zip": 411001})
        )
        assert result.ok
        assert result.record.address.zip == "411001"

    def test_boolean_zip_rejected(self):
        result = validation.validate_user_input(
            make_user_payload(address={"street": "1 Road", "city": "Pune", "zip": True})
        )
        assert "Complete address is required." in messages(result)

    @pytest.mark.parametrize("email", ["plainaddress", "a@b", "a b@c.com", "@x.org"])
    def test_bad_email_rejected(self, email):
        result = validation.validate_user_input(make_user_payload(email=email))
        assert "Invalid email format." in messages(result)

    @pytest.mark.parametrize("phone", ["12345", "98765-43210", "1234567890123456", "abcdefghij"])
    def test_bad_phone_rejected(self, phone):
        result = validation.validate_user_input(make_user_payload(phone=phone))
        assert "Invalid phone number." in messages(result)

    def test_numeric_phone_accepted(self):
        result = validation.validate_user_input(make_user_payload(phone=9876543210))
        assert result.ok
        assert result.record.phone == "9876543210"

    def test_markup_characters_stripped(self):
        result = validation.validate_user_input(
            make_user_payload(name="<b>Ayesha</b> $Khan")
        )
        assert result.ok
        assert result.record.name == "bAyesha/b Khan"

    def test_non_object_body_rejected(self):
        result = validation.validate_user_input(["not", "an", "object"])
        assert messages(result) == ["Request body must be a JSON object."]

    def test_unwrap_raises_single_error_with_all_failures(self):
        result = validation.validate_user_input(make_user_payload(age=-1, email="nope"))
        with pytest.raises(ValidationError) as exc:
            result.unwrap()
        assert exc.value.status_code == 422
        assert "Age must be a positive number." in exc.value.message
        assert "Invalid email format." in exc.value.message
        fields = {e["field"] for e in exc.value.details["errors"]}
        assert fields == {"age", "email"}


# =============================================================================
# Cases
# =============================================================================

class TestCaseValidation:

    def test_valid_case(self):
        result = validation.validate_case_input(make_case_payload(PARTY_ID))
        assert result.ok
        assert result.record.case_type is CaseType.FAMILY
        assert str(result.record.party_id) == PARTY_ID
        assert result.record.court_pending is None

    @pytest.mark.parametrize("missing", ["caseType", "issueDescription", "partyId", "oppositeParty"])
    def test_missing_required_field(self, missing):
        payload = make_case_payload(PARTY_ID)
        del payload[missing]
        result = validation.validate_case_input(payload)
        assert "All fields are required." in messages(result)

    def test_unknown_case_type(self):
        result = validation.validate_case_input(make_case_payload(PARTY_ID, caseType="Civil"))
        assert "Invalid case type." in messages(result)

    def test_blank_description_is_missing(self):
        result = validation.validate_case_input(
            make_case_payload(PARTY_ID, issueDescription="   ")
        )
        assert not result.ok

    def test_party_id_must_be_identifier(self):
        result = validation.validate_case_input(make_case_payload("not-a-uuid"))
        assert "Invalid party id." in messages(result)

    def test_opposite_party_needs_all_details(self):
        result = validation.validate_case_input(
            make_case_payload(PARTY_ID, oppositeParty={"name": "Imran", "contact": ""})
        )
        assert "Complete opposite party details are required." in messages(result)

    def test_proof_must_be_a_sequence(self):
        result = validation.validate_case_input(
            make_case_payload(PARTY_ID, proof="uploads/one.pdf")
        )
        assert "Proof must be an array." in messages(result)

    def test_proof_order_preserved(self):
        proof = ["uploads/b.pdf", "uploads/a.pdf"]
        result = validation.validate_case_input(make_case_payload(PARTY_ID, proof=proof))
        assert result.record.proof == proof

    def test_pending_court_without_case_number_rejected(self):
        result = validation.validate_case_input(
            make_case_payload(
                PARTY_ID,
                courtPending={"isPending": True, "courtOrPoliceName": "City Court"},
            )
        )
        assert "Court/police info is incomplete." in messages(result)

    def test_pending_court_with_details_accepted(self):
        result = validation.validate_case_input(
            make_case_payload(
                PARTY_ID,
                courtPending={
                    "isPending": True,
                    "caseNumber": "CS-118/2026",
                    "courtOrPoliceName": "City Court",
                },
            )
        )
        assert result.ok
        assert result.record.court_pending.case_number == "CS-118/2026"

    def test_not_pending_court_needs_no_details(self):
        result = validation.validate_case_input(
            make_case_payload(PARTY_ID, courtPending={"isPending": False})
        )
        assert result.ok
        assert result.record.court_pending.is_pending is False


# =============================================================================
# Workflow actions
# =============================================================================

class TestWorkflowValidation:

    def test_response_requires_boolean(self):
        assert not validation.validate_opposite_party_response({"accepted": "yes"}).ok
        result = validation.validate_opposite_party_response({"accepted": False, "reason": " busy "})
        assert result.record.accepted is False
        assert result.record.reason == "busy"

    def test_witnesses_keep_order_and_check_nominator(self):
        result = validation.validate_witnesses(
            {"witnesses": [{"name": "B"}, {"name": "A", "nominatedBy": "oppositeParty"}]}
        )
        assert [w.name for w in result.record] == ["B", "A"]

        bad = validation.validate_witnesses({"witnesses": [{"name": "C", "nominatedBy": "judge"}]})
        assert not bad.ok

    def test_empty_witness_list_rejected(self):
        assert not validation.validate_witnesses({"witnesses": []}).ok

    def test_panel_members_need_name_and_expertise(self):
        result = validation.validate_panel_members({"panel": [{"name": "X"}]})
        assert "Panel member expertise is required." in messages(result)

    def test_mediation_date_parsed_as_utc(self):
        result = validation.validate_mediation_request(
            {"scheduledAt": "2026-11-02T10:00:00Z", "attendees": ["Ayesha", " "]}
        )
        assert result.ok
        assert result.record.scheduled_at.tzinfo == timezone.utc
        assert result.record.attendees == ["Ayesha"]

    def test_mediation_requires_date(self):
        assert not validation.validate_mediation_request({"scheduledAt": "next week"}).ok

    @pytest.mark.parametrize("level", [0, 6, "5", True])
    def test_satisfaction_out_of_range(self, level):
        assert not validation.validate_resolution({"satisfactionLevel": level}).ok

    def test_status_override_accepts_any_enum_value(self):
        for status in CaseStatus:
            assert validation.validate_status_override({"status": status.value}).record is status

    def test_status_override_rejects_unknown(self):
        result = validation.validate_status_override({"status": "Closed"})
        assert messages(result) == ["Invalid status"]
