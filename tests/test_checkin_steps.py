"""Tests for the check-in step order, wizard state machine and normalizer."""
from unittest import mock

from cryptography.fernet import Fernet
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase, override_settings

from apps.surveys.engine import PendingSurvey
from apps.surveys.models import CoachingWin, SubmissionImmutableError, SurveySubmission
from apps.surveys.normalizer import (
    build_outcomes,
    normalize_checkin,
    survey_type_for_session,
    tri_state,
)
from apps.surveys.steps import (
    ANYTHING_ELSE,
    BETTER_MATCH,
    BOOKED_NEXT,
    COACH_MATCH,
    COMPLETE,
    CONTINUE_WITH_COACH,
    EXPERIENCE,
    NOT_BOOKED_REASON,
    NPS,
    OPEN_TO_CHAT,
    PROGRAM_OUTCOMES,
    TESTIMONIAL_CONSENT,
    WHATS_NOT_WORKING,
    WINS,
    is_answered,
    step_order,
    visible_answers,
)
from apps.surveys.store import SubmissionError, SubmissionStore, WinStore
from apps.surveys.wizard import CheckpointWizard, WizardError
import coachboard.encryption as enc_module

from .factories import add_sessions, make_participant

TEST_KEY = Fernet.generate_key().decode()

HAPPY_PATH = [EXPERIENCE, COACH_MATCH, WINS, BOOKED_NEXT, ANYTHING_ELSE, NPS, OPEN_TO_CHAT]


def pending(session_number=3, survey_type="feedback", session_id=None):
    return PendingSurvey(session_id, session_number, None, "Sam Coach", survey_type)


class StepOrderTests(SimpleTestCase):

    def test_default_order(self):
        self.assertEqual(step_order({}), HAPPY_PATH)

    def test_high_match_skips_match_branch(self):
        self.assertEqual(step_order({COACH_MATCH: 9}), HAPPY_PATH)

    def test_low_match_adds_branch(self):
        self.assertEqual(step_order({COACH_MATCH: 8}), [
            EXPERIENCE, COACH_MATCH, WHATS_NOT_WORKING, WINS, CONTINUE_WITH_COACH,
            BOOKED_NEXT, ANYTHING_ELSE, NPS, OPEN_TO_CHAT,
        ])

    def test_explore_adds_better_match(self):
        order = step_order({COACH_MATCH: 5, CONTINUE_WITH_COACH: "explore"})
        self.assertEqual(order.index(BETTER_MATCH), order.index(CONTINUE_WITH_COACH) + 1)

    def test_explore_without_low_match_is_ignored(self):
        self.assertNotIn(BETTER_MATCH, step_order({COACH_MATCH: 10, CONTINUE_WITH_COACH: "explore"}))

    def test_not_booked_adds_reason(self):
        order = step_order({BOOKED_NEXT: "no"})
        self.assertEqual(order.index(NOT_BOOKED_REASON), order.index(BOOKED_NEXT) + 1)
        self.assertNotIn(NOT_BOOKED_REASON, step_order({BOOKED_NEXT: "yes"}))

    def test_stale_branch_answers_are_not_visible(self):
        answers = {COACH_MATCH: 9, WHATS_NOT_WORKING: "too formal", CONTINUE_WITH_COACH: "explore"}
        self.assertEqual(visible_answers(answers), {COACH_MATCH: 9})

    def test_end_of_program_adds_outcomes_and_consent(self):
        self.assertEqual(step_order({}, end_of_program=True), [
            EXPERIENCE, COACH_MATCH, WINS, BOOKED_NEXT, ANYTHING_ELSE,
            PROGRAM_OUTCOMES, NPS, OPEN_TO_CHAT, TESTIMONIAL_CONSENT,
        ])

    def test_end_of_program_steps_absent_from_regular_checkin(self):
        order = step_order({COACH_MATCH: 5, BOOKED_NEXT: "no"})
        self.assertNotIn(PROGRAM_OUTCOMES, order)
        self.assertNotIn(TESTIMONIAL_CONSENT, order)

    def test_consent_answer_hidden_outside_end_of_program(self):
        answers = {NPS: 9, TESTIMONIAL_CONSENT: "yes"}
        self.assertEqual(visible_answers(answers), {NPS: 9})
        self.assertEqual(visible_answers(answers, end_of_program=True), answers)


class AdmissionGuardTests(SimpleTestCase):

    def test_ratings_required(self):
        self.assertFalse(is_answered(EXPERIENCE, {}))
        self.assertTrue(is_answered(NPS, {NPS: 0}))

    def test_optional_text_steps(self):
        self.assertTrue(is_answered(WINS, {}))
        self.assertTrue(is_answered(ANYTHING_ELSE, {ANYTHING_ELSE: ""}))

    def test_required_text_rejects_whitespace(self):
        self.assertFalse(is_answered(WHATS_NOT_WORKING, {WHATS_NOT_WORKING: "   "}))
        self.assertTrue(is_answered(WHATS_NOT_WORKING, {WHATS_NOT_WORKING: "pace"}))

    def test_other_reason_needs_text(self):
        self.assertFalse(is_answered(NOT_BOOKED_REASON, {NOT_BOOKED_REASON: "other"}))
        self.assertTrue(is_answered(NOT_BOOKED_REASON, {
            NOT_BOOKED_REASON: "other", "not_booked_other": "travel",
        }))
        self.assertTrue(is_answered(NOT_BOOKED_REASON, {NOT_BOOKED_REASON: "forgot"}))

    def test_program_outcomes_required(self):
        self.assertFalse(is_answered(PROGRAM_OUTCOMES, {}))
        self.assertFalse(is_answered(PROGRAM_OUTCOMES, {PROGRAM_OUTCOMES: "  "}))
        self.assertTrue(is_answered(PROGRAM_OUTCOMES, {PROGRAM_OUTCOMES: "More confident"}))

    def test_testimonial_consent_needs_yes_or_no(self):
        self.assertFalse(is_answered(TESTIMONIAL_CONSENT, {}))
        self.assertFalse(is_answered(TESTIMONIAL_CONSENT, {TESTIMONIAL_CONSENT: "maybe"}))
        self.assertTrue(is_answered(TESTIMONIAL_CONSENT, {TESTIMONIAL_CONSENT: "no"}))


class NormalizerTests(SimpleTestCase):

    def setUp(self):
        self.participant = mock.Mock(
            email=" Jane@Example.com ", first_name="Jane", last_name="Doe",
            company_name="Acme Corp", program="GROW - Cohort 1",
        )

    def test_happy_path_record(self):
        answers = {
            EXPERIENCE: 9, COACH_MATCH: 9, WINS: "", BOOKED_NEXT: "yes",
            ANYTHING_ELSE: "", NPS: 10, OPEN_TO_CHAT: "yes",
        }

        record = normalize_checkin(answers, pending(session_number=3), self.participant)

        self.assertNotIn("not working", record.feedback.lower())
        self.assertNotIn("better match", record.feedback.lower())
        self.assertIn("Experience: 9/10", record.feedback)
        self.assertIn("Booked next session: Yes", record.feedback)
        self.assertTrue(record.next_session_booked)
        self.assertIsNone(record.not_booked_reasons)
        self.assertTrue(record.open_to_followup)
        self.assertTrue(record.open_to_testimonial)
        self.assertEqual(record.outcomes, "Session 3, Coach match: 9/10")
        self.assertEqual(record.survey_type, "feedback")
        self.assertEqual(record.email, "jane@example.com")
        self.assertEqual(record.account_name, "Acme Corp")
        self.assertEqual(record.program_title, "GROW - Cohort 1")

    def test_branch_answers_use_labels(self):
        answers = {
            COACH_MATCH: 6, CONTINUE_WITH_COACH: "explore",
            BETTER_MATCH: "wants more structure", BOOKED_NEXT: "no",
            NOT_BOOKED_REASON: "other", "not_booked_other": "travel",
        }

        record = normalize_checkin(answers, pending(), self.participant)

        self.assertIn("Better match criteria: wants more structure", record.feedback)
        self.assertIn("What's in the way: Other: travel", record.feedback)
        self.assertIn("Continue with coach: Explore other options", record.feedback)
        self.assertEqual(record.not_booked_reasons, ["Other: travel"])
        self.assertFalse(record.next_session_booked)
        self.assertIsNone(record.open_to_followup)
        self.assertFalse(record.open_to_testimonial)

    def test_reason_label(self):
        answers = {BOOKED_NEXT: "no", NOT_BOOKED_REASON: "busy_schedule"}
        record = normalize_checkin(answers, pending(), self.participant)
        self.assertEqual(record.not_booked_reasons, ["Busy schedule"])

    def test_stale_branch_dropped(self):
        answers = {COACH_MATCH: 10, WHATS_NOT_WORKING: "too formal", BOOKED_NEXT: "yes"}
        record = normalize_checkin(answers, pending(), self.participant)
        self.assertNotIn("not working", record.feedback.lower())
        self.assertNotIn("too formal", record.feedback)

    def test_unanswered_sections_add_nothing(self):
        record = normalize_checkin({COACH_MATCH: 9}, pending(), self.participant)
        self.assertEqual(record.feedback, "Coach match: 9/10")

    def test_wins_text_is_kept_out_of_feedback(self):
        record = normalize_checkin({WINS: "Got promoted"}, pending(), self.participant)
        self.assertEqual(record.wins_text, "Got promoted")
        self.assertNotIn("promoted", record.feedback)

    def test_survey_type_by_sequence_number(self):
        self.assertEqual(survey_type_for_session(1), "first_session")
        self.assertEqual(survey_type_for_session(3), "feedback")
        self.assertEqual(survey_type_for_session(6), "touchpoint")
        self.assertEqual(survey_type_for_session(12), "touchpoint")

    def test_end_of_program_keeps_its_type(self):
        record = normalize_checkin({}, pending(6, "grow_end"), self.participant)
        self.assertEqual(record.survey_type, "grow_end")

    def test_end_of_program_testimonial_comes_from_consent(self):
        answers = {
            PROGRAM_OUTCOMES: " Leading my team with more confidence ",
            OPEN_TO_CHAT: "no", TESTIMONIAL_CONSENT: "yes",
        }

        record = normalize_checkin(answers, pending(6, "grow_end"), self.participant)

        self.assertTrue(record.open_to_testimonial)
        self.assertFalse(record.open_to_followup)
        self.assertEqual(record.program_outcomes, "Leading my team with more confidence")
        self.assertIn("Program outcomes: Leading my team with more confidence", record.feedback)
        self.assertIn("Open to a testimonial: Yes", record.feedback)

    def test_end_of_program_consent_declined(self):
        answers = {OPEN_TO_CHAT: "yes", TESTIMONIAL_CONSENT: "no"}
        record = normalize_checkin(answers, pending(36, "end_of_program"), self.participant)
        self.assertTrue(record.open_to_followup)
        self.assertFalse(record.open_to_testimonial)

    def test_regular_checkin_ignores_stray_end_answers(self):
        answers = {OPEN_TO_CHAT: "no", TESTIMONIAL_CONSENT: "yes", PROGRAM_OUTCOMES: "x"}
        record = normalize_checkin(answers, pending(), self.participant)
        self.assertFalse(record.open_to_testimonial)
        self.assertEqual(record.program_outcomes, "")
        self.assertNotIn("Program outcomes", record.feedback)

    def test_helpers(self):
        self.assertIsNone(tri_state(None))
        self.assertFalse(tri_state("no"))
        self.assertEqual(build_outcomes(4), "Session 4")


class WizardNavigationTests(SimpleTestCase):

    def setUp(self):
        self.store = mock.Mock(spec=SubmissionStore)
        self.wins = mock.Mock(spec=WinStore)
        self.participant = mock.Mock(
            email="jane@example.com", first_name="Jane", last_name="Doe",
            company_name="Acme", program="SCALE",
        )
        self.wizard = CheckpointWizard(
            pending(), participant=self.participant, store=self.store, wins=self.wins,
        )

    def answer_and_next(self, field, value):
        self.wizard.answer(field, value)
        self.assertTrue(self.wizard.next())

    def test_starts_at_experience(self):
        self.assertEqual(self.wizard.current_step, EXPERIENCE)
        self.assertEqual(self.wizard.progress(), round(1 / 7 * 100))

    def test_forward_blocked_until_answered(self):
        self.assertFalse(self.wizard.can_proceed())
        self.assertFalse(self.wizard.next())
        self.assertEqual(self.wizard.current_step, EXPERIENCE)

    def test_out_of_range_rating(self):
        with self.assertRaises(WizardError):
            self.wizard.answer(EXPERIENCE, 11)
        with self.assertRaises(WizardError):
            self.wizard.answer(NPS, -1)

    def test_answer_for_hidden_step(self):
        with self.assertRaises(WizardError):
            self.wizard.answer(BETTER_MATCH, "more structure")

    def test_progress_recomputed_when_branch_opens(self):
        self.answer_and_next(EXPERIENCE, 7)
        self.wizard.answer(COACH_MATCH, 9)
        self.assertEqual(self.wizard.progress(), round(2 / 7 * 100))
        self.wizard.answer(COACH_MATCH, 5)
        self.assertEqual(self.wizard.progress(), round(2 / 9 * 100))

    def test_back_after_changing_match_rating(self):
        self.answer_and_next(EXPERIENCE, 7)
        self.answer_and_next(COACH_MATCH, 5)
        self.assertEqual(self.wizard.current_step, WHATS_NOT_WORKING)
        self.assertTrue(self.wizard.back())
        self.answer_and_next(COACH_MATCH, 10)
        self.assertEqual(self.wizard.current_step, WINS)

    def test_progress_never_drops_along_longest_branch(self):
        path = [
            (EXPERIENCE, 9), (COACH_MATCH, 5), (WHATS_NOT_WORKING, "feels rushed"),
            (WINS, ""), (CONTINUE_WITH_COACH, "explore"), (BETTER_MATCH, "more structure"),
            (BOOKED_NEXT, "no"), (NOT_BOOKED_REASON, "other"), (ANYTHING_ELSE, ""),
        ]
        seen = []
        for field, value in path:
            self.assertEqual(self.wizard.current_step, field)
            self.wizard.answer(field, value)
            if field == NOT_BOOKED_REASON:
                self.wizard.answer("not_booked_other", "travel")
            seen.append(self.wizard.progress())
            self.assertTrue(self.wizard.next())

        self.assertEqual(seen, [14, 22, 33, 44, 50, 60, 64, 73, 82])
        self.assertEqual(seen, sorted(seen))
        self.assertEqual(self.wizard.current_step, NPS)

    def test_end_of_program_wizard_walks_extra_steps(self):
        wizard = CheckpointWizard(
            pending(6, "grow_end"), participant=self.participant,
            store=self.store, wins=self.wins,
        )
        for field, value in [
            (EXPERIENCE, 9), (COACH_MATCH, 10), (WINS, ""), (BOOKED_NEXT, "yes"),
            (ANYTHING_ELSE, ""), (PROGRAM_OUTCOMES, "Clearer priorities"), (NPS, 10),
            (OPEN_TO_CHAT, "no"),
        ]:
            wizard.answer(field, value)
            self.assertTrue(wizard.next())
        self.assertEqual(wizard.current_step, TESTIMONIAL_CONSENT)
        self.assertEqual(wizard.action_label(), "Done")
        self.assertFalse(wizard.next())

        wizard.answer(TESTIMONIAL_CONSENT, "yes")
        self.assertTrue(wizard.next())
        record = self.store.create.call_args[0][0]
        self.assertEqual(record.survey_type, "grow_end")
        self.assertEqual(record.program_outcomes, "Clearer priorities")
        self.assertTrue(record.open_to_testimonial)

    def test_back_on_first_step(self):
        self.assertFalse(self.wizard.back())

    def test_action_labels(self):
        self.answer_and_next(EXPERIENCE, 7)
        self.assertEqual(self.wizard.action_label(), "Next")
        self.answer_and_next(COACH_MATCH, 9)
        self.assertEqual(self.wizard.action_label(), "Skip")
        self.wizard.answer(WINS, "Shipped it")
        self.assertEqual(self.wizard.action_label(), "Next")
        self.wizard.current_step = OPEN_TO_CHAT
        self.assertEqual(self.wizard.action_label(), "Done")

    def complete_happy_path(self, wins=""):
        self.answer_and_next(EXPERIENCE, 9)
        self.answer_and_next(COACH_MATCH, 9)
        self.answer_and_next(WINS, wins)
        self.answer_and_next(BOOKED_NEXT, "yes")
        self.answer_and_next(ANYTHING_ELSE, "")
        self.answer_and_next(NPS, 10)
        self.wizard.answer(OPEN_TO_CHAT, "yes")
        return self.wizard.next()

    def test_last_step_submits(self):
        self.assertTrue(self.complete_happy_path())
        self.assertEqual(self.wizard.current_step, COMPLETE)
        self.assertEqual(self.wizard.progress(), 100)
        self.store.create.assert_called_once()
        record = self.store.create.call_args[0][0]
        self.assertEqual(record.outcomes, "Session 3, Coach match: 9/10")
        self.wins.append_detached.assert_not_called()

    def test_wins_written_detached(self):
        self.complete_happy_path(wins="Led my first board meeting")
        self.wins.append_detached.assert_called_once_with(
            self.participant, "Led my first board meeting", session_number=3,
        )

    def test_submission_failure_returns_to_last_step(self):
        self.store.create.side_effect = SubmissionError("db down")
        self.assertFalse(self.complete_happy_path(wins="Something"))
        self.assertEqual(self.wizard.current_step, OPEN_TO_CHAT)
        self.assertTrue(self.wizard.error)
        self.wins.append_detached.assert_not_called()
        self.store.create.assert_called_once()

    def test_submit_moves_to_first_missing_step(self):
        self.wizard.answer(EXPERIENCE, 9)
        self.wizard.current_step = NPS
        self.assertFalse(self.wizard.submit())
        self.assertEqual(self.wizard.current_step, COACH_MATCH)
        self.store.create.assert_not_called()

    def test_dismiss_clears_answers(self):
        self.answer_and_next(EXPERIENCE, 9)
        self.wizard.dismiss()
        self.assertEqual(self.wizard.answers, {})
        self.assertEqual(self.wizard.current_step, EXPERIENCE)
        self.store.create.assert_not_called()

    def test_state_round_trip(self):
        self.answer_and_next(EXPERIENCE, 9)
        restored = CheckpointWizard.from_dict(
            self.wizard.to_dict(), participant=self.participant, store=self.store,
        )
        self.assertEqual(restored.current_step, COACH_MATCH)
        self.assertEqual(restored.answers, {EXPERIENCE: 9})
        self.assertEqual(restored.pending_survey, self.wizard.pending_survey)


@override_settings(FIELD_ENCRYPTION_KEY=TEST_KEY)
class WizardPersistenceTests(TestCase):

    def setUp(self):
        enc_module._fernet = None
        self.participant = make_participant(program="SCALE")
        self.session = add_sessions(self.participant, 1)[0]
        self.pending = PendingSurvey(self.session.pk, 1, self.session.session_date, "Sam Coach", "feedback")

    def run_wizard(self, wins=""):
        wizard = CheckpointWizard(self.pending, participant=self.participant)
        for field, value in [
            (EXPERIENCE, 8), (COACH_MATCH, 10), (WINS, wins), (BOOKED_NEXT, "yes"),
            (ANYTHING_ELSE, "Thanks!"), (NPS, 9), (OPEN_TO_CHAT, "no"),
        ]:
            wizard.answer(field, value)
            wizard.next()
        return wizard

    def test_submission_stored_encrypted(self):
        wizard = self.run_wizard()
        self.assertTrue(wizard.is_complete)

        submission = SurveySubmission.objects.get()
        self.assertEqual(submission.session_id, self.session.pk)
        self.assertEqual(submission.survey_type, "first_session")
        self.assertEqual(submission.outcomes, "Session 1, Coach match: 10/10")
        self.assertIn("Anything else: Thanks!", submission.feedback)
        self.assertNotIn(b"Thanks", bytes(submission._feedback_encrypted))
        self.assertFalse(submission.open_to_followup)
        self.assertFalse(submission.open_to_testimonial)
        self.assertEqual(submission.first_name, "Jane")

    def test_win_written_after_commit(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.run_wizard(wins="Negotiated a raise")
        win = CoachingWin.objects.get()
        self.assertEqual(win.text, "Negotiated a raise")
        self.assertEqual(win.session_number, 1)
        self.assertEqual(win.source, CoachingWin.SOURCE_CHECKIN)

    def test_win_failure_does_not_undo_submission(self):
        with mock.patch.object(WinStore, "append", side_effect=RuntimeError("disk full")):
            with self.assertLogs("apps.surveys.store", level="ERROR"):
                with self.captureOnCommitCallbacks(execute=True):
                    wizard = self.run_wizard(wins="Negotiated a raise")
        self.assertTrue(wizard.is_complete)
        self.assertEqual(SurveySubmission.objects.count(), 1)
        self.assertEqual(CoachingWin.objects.count(), 0)

    def test_database_failure_becomes_inline_error(self):
        with mock.patch.object(SurveySubmission, "save", side_effect=DatabaseError("gone")):
            with self.assertLogs("apps.surveys.store", level="ERROR"):
                wizard = self.run_wizard()
        self.assertFalse(wizard.is_complete)
        self.assertEqual(wizard.current_step, OPEN_TO_CHAT)
        self.assertIn("couldn't save", wizard.error)

    def test_submissions_are_write_once(self):
        self.run_wizard()
        submission = SurveySubmission.objects.get()
        with self.assertRaises(SubmissionImmutableError):
            submission.save()

    def test_end_of_program_outcomes_stored_encrypted(self):
        self.pending = PendingSurvey(self.session.pk, 6, self.session.session_date, "Sam Coach", "grow_end")
        wizard = CheckpointWizard(self.pending, participant=self.participant)
        for field, value in [
            (EXPERIENCE, 8), (COACH_MATCH, 10), (WINS, ""), (BOOKED_NEXT, "yes"),
            (ANYTHING_ELSE, ""), (PROGRAM_OUTCOMES, "Promoted to team lead"), (NPS, 9),
            (OPEN_TO_CHAT, "no"), (TESTIMONIAL_CONSENT, "yes"),
        ]:
            wizard.answer(field, value)
            wizard.next()
        self.assertTrue(wizard.is_complete)

        submission = SurveySubmission.objects.get()
        self.assertEqual(submission.survey_type, "grow_end")
        self.assertEqual(submission.program_outcomes, "Promoted to team lead")
        self.assertNotIn(b"Promoted", bytes(submission._program_outcomes_encrypted))
        self.assertTrue(submission.open_to_testimonial)
        self.assertFalse(submission.open_to_followup)

    def test_session_id_from_elsewhere_is_not_linked(self):
        self.pending = PendingSurvey("a0X5e00000Abc", 1, None, "Sam Coach", "feedback")
        self.run_wizard()
        submission = SurveySubmission.objects.get()
        self.assertIsNone(submission.session_id)
        self.assertEqual(submission.outcomes, "Session 1, Coach match: 10/10")
