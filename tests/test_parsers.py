#!/usr/bin/env python3
"""Tests for payload parsing into model objects."""

import dataclasses

import pytest

import payloads
from librus import parsers


def test_grades_normalise_mixed_identifier_types():
	grades = parsers.parse_grades(payloads.GRADES)
	assert [g.id for g in grades] == ["1001", "1002"]
	assert grades[0].subject.id == "22"
	assert grades[0].lesson.id == "11"
	assert grades[0].comments[0].id == "501"
	assert grades[1].comments == []
	assert grades[0].improvement is None


def test_models_are_immutable():
	grade = parsers.parse_grades(payloads.GRADES)[0]
	with pytest.raises(dataclasses.FrozenInstanceError):
		grade.grade = "6"


def test_grade_category_accepts_string_boolean():
	category = parsers.parse_grade_category(payloads.GRADE_CATEGORY)
	assert category.id == "44"
	assert category.name == "Sprawdzian"
	assert category.is_read_only is False
	assert category.count_to_the_average is True


def test_grade_comment_and_missing_comment():
	comment = parsers.parse_grade_comment(payloads.GRADE_COMMENT)
	assert comment.text == "Poprawa"
	assert comment.grade.id == "1001"
	assert parsers.parse_grade_comment({"Resources": {}, "Url": "x"}) is None


def test_lesson_and_subject():
	lesson = parsers.parse_lesson(payloads.LESSON)
	assert lesson.teacher.id == "55"
	assert lesson.class_.id == "7"
	subject = parsers.parse_subject(payloads.SUBJECT)
	assert str(subject) == "Matematyka (mat)"
	assert subject.no == 3
	assert parsers.parse_subject({"Url": "x"}) is None


def test_attendance_ids_may_be_strings_or_numbers():
	attendances = parsers.parse_attendances(payloads.ATTENDANCES)
	assert [a.id for a in attendances] == ["t2841", "2842"]
	assert attendances[1].lesson_no == 2
	assert attendances[1].semester == 2
	assert attendances[0].trip is None
	assert attendances[1].trip.id == "9"


def test_attendance_types_optional_fields():
	types = parsers.parse_attendance_types(payloads.ATTENDANCE_TYPES)
	assert types[0].color_rgb == "00FF00"
	assert types[1].color_rgb is None
	assert types[1].standard_type.id == "1"
	assert types[0].is_presence_kind is True


def test_homework_with_classroom():
	homework = parsers.parse_homeworks(payloads.HOMEWORKS)[0]
	assert homework.id == "77"
	assert homework.classroom.name == "Sala 12"
	assert homework.classroom.size == 30
	assert homework.subject.id == "22"


def test_me():
	me = parsers.parse_me(payloads.ME)
	assert str(me) == "Jan Kowalski"
	assert me.account.id == "900"
	assert me.account.user_id == "33"
	assert me.account.expired_premium_date is None
	assert me.class_.id == "7"


def test_user_and_missing_user():
	user = parsers.parse_user(payloads.USER)
	assert user.full_name == "Anna Nowak"
	assert user.account_id == "2345678"
	assert user.class_ is None
	assert parsers.parse_user({"Url": "x"}) is None


def test_school_notices_mixed_ids_and_text():
	notices = parsers.parse_school_notices(payloads.SCHOOL_NOTICES)
	assert [n.id for n in notices] == ["a1b2c3", "42"]
	assert notices[0].text == "Wycieczka do Krakowa & Wieliczki"
	assert notices[0].added_by.id == "55"
	assert notices[1].was_read is True


def test_timetable_days_and_slots():
	timetable = parsers.parse_timetable(payloads.TIMETABLE)
	assert sorted(timetable.days) == ["2024-03-04", "2024-03-05"]
	assert timetable.days["2024-03-04"][0] == []
	entries = timetable.entries_for("2024-03-04")
	assert len(entries) == 1
	assert str(entries[0]) == "Matematyka (08:00-08:45)"
	assert entries[0].teacher.full_name == "Anna Nowak"
	assert entries[0].lesson_no == 1
	assert timetable.entries_for("2024-03-05") == []
	assert timetable.next_page.endswith("2024-03-11")


def test_unread_counts_missing_counters_default_to_zero():
	counts = parsers.parse_unread_counts(payloads.UNREAD_COUNTS)
	assert counts.inbox == 3
	assert counts.alerts == 1
	assert counts.archive_trash == 0


def test_inbox_message_ids_normalised():
	messages = parsers.parse_inbox_messages(payloads.inbox_page(4))
	assert [m.message_id for m in messages] == ["1000", "1001", "1002", "1003"]
	assert messages[0].decoded_content == "Treść 0"
	assert messages[0].is_read is False


def test_outbox_messages():
	message = parsers.parse_outbox_messages(payloads.OUTBOX)[0]
	assert message.receiver_name == "Anna Nowak"
	assert message.decoded_content == "Proszę o usprawiedliwienie"
	assert message.tags == ["ważne"]


def test_message_detail():
	detail = parsers.parse_message_detail(payloads.MESSAGE_DETAIL)
	assert detail.sender_id == "55"
	assert detail.decoded_content == "Dzień dobry,\nzapraszam na zebranie."
	assert detail.attachments[0].id == "314"
	assert detail.attachments[0].size == 2048
	assert detail.no_reply is True
	assert detail.archive is False


def test_missing_required_field_raises_key_error():
	broken = {"Grades": [{k: v for k, v in payloads.GRADE.items() if k != "Grade"}]}
	with pytest.raises(KeyError):
		parsers.parse_grades(broken)


def test_wrong_container_type_raises_type_error():
	with pytest.raises(TypeError):
		parsers.parse_grades({"Grades": {"not": "a list"}})
