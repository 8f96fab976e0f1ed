from passi.models.answer import Answersheet
from passi.services.progress import feedback_complete_map, get_progress


def test_progress_counts_answers_against_all_worksheets(gateway):
    progress = get_progress(gateway, "alice")

    assert progress.completed == 1
    assert progress.total == 3


def test_progress_for_user_without_answers(gateway):
    assert get_progress(gateway, "bob").completed == 0
    assert get_progress(gateway, "nobody").total == 3


def test_feedback_map_follows_instructor_flag(gateway, db, seed_data):
    assert feedback_complete_map(gateway, 5, seed_data.alice_id) == {10: False}

    sheet = db.get(Answersheet, 1)
    sheet.feedback_complete = True
    sheet.instructor_comment = "Well done"
    db.commit()

    assert feedback_complete_map(gateway, 5, seed_data.alice_id) == {10: True}


def test_feedback_map_empty_without_answers(gateway, seed_data):
    assert feedback_complete_map(gateway, 6, seed_data.bob_id) == {}
    assert feedback_complete_map(gateway, 6, seed_data.alice_id) == {}
