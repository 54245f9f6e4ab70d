"""Parsers turning Librus JSON payloads into model objects.

Parsers read required keys with ``data[...]`` and optional ones with
``data.get(...)``, so a payload missing a required key raises ``KeyError``.
The client wraps such failures into ``LibrusDataError`` together with the
raw body.
"""

import logging
from typing import Any, Dict, List, Optional

from .models import (
	Reference, Grade, GradeCategory, GradeComment, Lesson, Subject,
	Attendance, AttendanceType, Classroom, Homework, Account, UserProfile, Me,
	User, SchoolNotice, TimetableEntry, Timetable, UnreadCounts, InboxMessage,
	OutboxMessage, Attachment, MessageDetail
)
from .utils import parse_id, parse_int, parse_bool, parse_optional_str

_LOGGER = logging.getLogger(__name__)

_UNREAD_COUNT_KEYS = {
	"inbox": "inbox",
	"notes": "notes",
	"alerts": "alerts",
	"substitutions": "substitutions",
	"absences": "absences",
	"justifications": "justifications",
	"trash": "trash",
	"archiveInbox": "archive_inbox",
	"archiveNotes": "archive_notes",
	"archiveAlerts": "archive_alerts",
	"archiveSubstitutions": "archive_substitutions",
	"archiveAbsences": "archive_absences",
	"archiveJustifications": "archive_justifications",
	"archiveTrash": "archive_trash",
}


def _require_dict(data: Any, what: str) -> Dict[str, Any]:
	if not isinstance(data, dict):
		raise TypeError(f"Expected an object for {what}, got {type(data).__name__}")
	return data


def _require_list(data: Any, what: str) -> List[Any]:
	if not isinstance(data, list):
		raise TypeError(f"Expected a list for {what}, got {type(data).__name__}")
	return data


def _required_id(data: Dict[str, Any], key: str) -> str:
	value = parse_id(data[key])
	if value is None:
		raise ValueError(f"Identifier {key} is null")
	return value


def parse_reference(data: Any) -> Reference:
	"""Parse an ``{"Id": ..., "Url": ...}`` pointer."""
	data = _require_dict(data, "reference")
	return Reference(id=_required_id(data, "Id"), url=data.get("Url"))


def _optional_reference(data: Optional[Any]) -> Optional[Reference]:
	if not data:
		return None
	return parse_reference(data)


def parse_grade(item: Dict[str, Any]) -> Grade:
	item = _require_dict(item, "grade")
	return Grade(
		id=_required_id(item, "Id"),
		lesson=parse_reference(item["Lesson"]),
		subject=parse_reference(item["Subject"]),
		student=parse_reference(item["Student"]),
		category=parse_reference(item["Category"]),
		added_by=parse_reference(item["AddedBy"]),
		grade=str(item["Grade"]),
		date=item["Date"],
		add_date=item["AddDate"],
		semester=parse_int(item["Semester"]),
		is_constituent=parse_bool(item.get("IsConstituent")),
		is_semester=parse_bool(item.get("IsSemester")),
		is_semester_proposition=parse_bool(item.get("IsSemesterProposition")),
		is_final=parse_bool(item.get("IsFinal")),
		is_final_proposition=parse_bool(item.get("IsFinalProposition")),
		comments=[parse_reference(c) for c in item.get("Comments") or []],
		improvement=_optional_reference(item.get("Improvement")),
		resit=_optional_reference(item.get("Resit")),
	)


def parse_grades(data: Any) -> List[Grade]:
	"""Parse the ``Grades`` envelope.

	Args:
		data: Decoded response body

	Returns:
		List of Grade objects
	"""
	data = _require_dict(data, "grades response")
	return [parse_grade(item) for item in _require_list(data["Grades"], "Grades")]


def parse_grade_category(data: Any) -> GradeCategory:
	data = _require_dict(data, "grade category response")
	item = _require_dict(data["Category"], "Category")
	return GradeCategory(
		id=_required_id(item, "Id"),
		name=item["Name"],
		color=_optional_reference(item.get("Color")),
		adults_extramural=parse_bool(item.get("AdultsExtramural")),
		adults_daily=parse_bool(item.get("AdultsDaily")),
		standard=parse_bool(item.get("Standard")),
		is_read_only=parse_bool(item.get("IsReadOnly")),
		count_to_the_average=parse_bool(item.get("CountToTheAverage")),
		block_any_grades=parse_bool(item.get("BlockAnyGrades")),
		obligation_to_perform=parse_bool(item.get("ObligationToPerform")),
	)


def parse_grade_comment(data: Any) -> Optional[GradeComment]:
	data = _require_dict(data, "grade comment response")
	item = data.get("Comment")
	if not item:
		return None
	item = _require_dict(item, "Comment")
	return GradeComment(
		id=_required_id(item, "Id"),
		added_by=parse_reference(item["AddedBy"]),
		grade=parse_reference(item["Grade"]),
		text=item.get("Text") or "",
	)


def parse_lesson(data: Any) -> Lesson:
	data = _require_dict(data, "lesson response")
	item = _require_dict(data["Lesson"], "Lesson")
	return Lesson(
		id=_required_id(item, "Id"),
		teacher=parse_reference(item["Teacher"]),
		subject=parse_reference(item["Subject"]),
		class_=parse_reference(item["Class"]),
	)


def _subject_from_item(item: Dict[str, Any]) -> Subject:
	return Subject(
		id=_required_id(item, "Id"),
		name=item["Name"],
		short=item.get("Short") or "",
		no=parse_int(item.get("No")),
		is_extracurricular=parse_bool(item["IsExtracurricular"]) if item.get("IsExtracurricular") is not None else None,
		is_block_lesson=parse_bool(item["IsBlockLesson"]) if item.get("IsBlockLesson") is not None else None,
	)


def parse_subject(data: Any) -> Optional[Subject]:
	data = _require_dict(data, "subject response")
	item = data.get("Subject")
	if not item:
		return None
	return _subject_from_item(_require_dict(item, "Subject"))


def parse_attendance(item: Dict[str, Any]) -> Attendance:
	item = _require_dict(item, "attendance")
	return Attendance(
		id=_required_id(item, "Id"),
		lesson=parse_reference(item["Lesson"]),
		student=parse_reference(item["Student"]),
		date=item["Date"],
		add_date=item["AddDate"],
		lesson_no=parse_int(item["LessonNo"]),
		semester=parse_int(item["Semester"]),
		type=parse_reference(item["Type"]),
		added_by=parse_reference(item["AddedBy"]),
		trip=_optional_reference(item.get("Trip")),
	)


def parse_attendances(data: Any) -> List[Attendance]:
	data = _require_dict(data, "attendances response")
	return [parse_attendance(item) for item in _require_list(data["Attendances"], "Attendances")]


def parse_attendance_types(data: Any) -> List[AttendanceType]:
	data = _require_dict(data, "attendance types response")
	types = []
	for item in _require_list(data["Types"], "Types"):
		item = _require_dict(item, "attendance type")
		types.append(AttendanceType(
			id=_required_id(item, "Id"),
			name=item["Name"],
			short=item.get("Short") or "",
			standard=parse_bool(item.get("Standard")),
			color_rgb=item.get("ColorRGB"),
			is_presence_kind=parse_bool(item.get("IsPresenceKind")),
			order=parse_int(item.get("Order")),
			identifier=parse_optional_str(item.get("Identifier")),
			standard_type=_optional_reference(item.get("StandardType")),
			color=_optional_reference(item.get("Color")),
		))
	return types


def _parse_classroom(item: Optional[Any]) -> Optional[Classroom]:
	if not item:
		return None
	item = _require_dict(item, "classroom")
	return Classroom(
		id=_required_id(item, "Id"),
		symbol=item.get("Symbol"),
		name=item.get("Name"),
		size=parse_int(item.get("Size")),
	)


def parse_homeworks(data: Any) -> List[Homework]:
	data = _require_dict(data, "homeworks response")
	homeworks = []
	for item in _require_list(data["HomeWorks"], "HomeWorks"):
		item = _require_dict(item, "homework")
		homeworks.append(Homework(
			id=_required_id(item, "Id"),
			content=item.get("Content") or "",
			date=item["Date"],
			category=parse_reference(item["Category"]),
			created_by=parse_reference(item["CreatedBy"]),
			lesson_no=parse_optional_str(item.get("LessonNo")),
			time_from=item.get("TimeFrom"),
			time_to=item.get("TimeTo"),
			class_=_optional_reference(item.get("Class")),
			subject=_optional_reference(item.get("Subject")),
			add_date=item.get("AddDate"),
			classroom=_parse_classroom(item.get("Classroom")),
		))
	return homeworks


def parse_me(data: Any) -> Me:
	"""Parse the ``Me`` envelope.

	Args:
		data: Decoded response body

	Returns:
		Me object
	"""
	data = _require_dict(data, "me response")
	me = _require_dict(data["Me"], "Me")
	account = _require_dict(me["Account"], "Account")
	user = _require_dict(me["User"], "User")
	return Me(
		account=Account(
			id=_required_id(account, "Id"),
			user_id=_required_id(account, "UserId"),
			first_name=account.get("FirstName") or "",
			last_name=account.get("LastName") or "",
			login=account["Login"],
			email=account.get("Email"),
			group_id=parse_int(account.get("GroupId")),
			is_active=parse_bool(account.get("IsActive")),
			is_premium=parse_bool(account.get("IsPremium")),
			is_premium_demo=parse_bool(account.get("IsPremiumDemo")),
			expired_premium_date=parse_int(account.get("ExpiredPremiumDate")),
			premium_addons=list(account.get("PremiumAddons") or []),
		),
		user=UserProfile(
			first_name=user.get("FirstName") or "",
			last_name=user.get("LastName") or "",
		),
		class_=_optional_reference(me.get("Class")),
		refresh=parse_int(me.get("Refresh")),
	)


def parse_user(data: Any) -> Optional[User]:
	data = _require_dict(data, "user response")
	item = data.get("User")
	if not item:
		return None
	item = _require_dict(item, "User")
	class_data = item.get("Class") or None
	return User(
		id=_required_id(item, "Id"),
		first_name=item.get("FirstName") or "",
		last_name=item.get("LastName") or "",
		account_id=parse_id(item.get("AccountId")),
		class_=_optional_reference(class_data),
		class_uuid=class_data.get("UUID") if class_data else None,
		unit=_optional_reference(item.get("Unit")),
		class_register_number=parse_int(item.get("ClassRegisterNumber")),
		is_employee=parse_bool(item.get("IsEmployee")),
		group_id=parse_int(item.get("GroupId")),
	)


def parse_school_notices(data: Any) -> List[SchoolNotice]:
	data = _require_dict(data, "school notices response")
	notices = []
	for item in _require_list(data["SchoolNotices"], "SchoolNotices"):
		item = _require_dict(item, "school notice")
		notices.append(SchoolNotice(
			id=_required_id(item, "Id"),
			subject=item.get("Subject") or "",
			content=item.get("Content") or "",
			creation_date=item["CreationDate"],
			start_date=item.get("StartDate"),
			end_date=item.get("EndDate"),
			added_by=_optional_reference(item.get("AddedBy")),
			was_read=parse_bool(item.get("WasRead")),
		))
	return notices


def _parse_timetable_entry(item: Dict[str, Any]) -> TimetableEntry:
	subject = item.get("Subject")
	teacher = item.get("Teacher")
	return TimetableEntry(
		lesson=_optional_reference(item.get("Lesson")),
		subject=_subject_from_item(_require_dict(subject, "Subject")) if subject else None,
		teacher=User(
			id=_required_id(teacher, "Id"),
			first_name=teacher.get("FirstName") or "",
			last_name=teacher.get("LastName") or "",
		) if teacher else None,
		classroom=_optional_reference(item.get("Classroom")),
		class_=_optional_reference(item.get("Class")),
		lesson_no=parse_int(item.get("LessonNo")),
		hour_from=item.get("HourFrom"),
		hour_to=item.get("HourTo"),
		is_canceled=parse_bool(item.get("IsCanceled")),
		is_substitution_class=parse_bool(item.get("IsSubstitutionClass")),
	)


def parse_timetable(data: Any) -> Timetable:
	"""Parse the ``Timetable`` envelope.

	Days map to a list of lesson slots; each slot is a list of entries and
	is often empty for free periods.

	Args:
		data: Decoded response body

	Returns:
		Timetable object
	"""
	data = _require_dict(data, "timetable response")
	raw_days = data.get("Timetable") or {}
	days = {}
	for day, slots in _require_dict(raw_days, "Timetable").items():
		parsed_slots = []
		for slot in _require_list(slots or [], f"Timetable[{day}]"):
			parsed_slots.append([
				_parse_timetable_entry(_require_dict(entry, "timetable entry"))
				for entry in _require_list(slot or [], f"Timetable[{day}] slot")
			])
		days[day] = parsed_slots
	_LOGGER.debug(f"Parsed timetable with {len(days)} days")
	pages = data.get("Pages") or {}
	return Timetable(
		days=days,
		next_page=pages.get("Next"),
		prev_page=pages.get("Prev"),
	)


def parse_unread_counts(data: Any) -> UnreadCounts:
	data = _require_dict(data, "unread counts response")
	counts = _require_dict(data["data"], "data")
	return UnreadCounts(**{
		attr: parse_int(counts.get(key), default=0)
		for key, attr in _UNREAD_COUNT_KEYS.items()
	})


def _parse_inbox_message(item: Dict[str, Any]) -> InboxMessage:
	item = _require_dict(item, "inbox message")
	return InboxMessage(
		message_id=_required_id(item, "messageId"),
		sender_first_name=item.get("senderFirstName") or "",
		sender_last_name=item.get("senderLastName") or "",
		sender_name=item["senderName"],
		topic=item.get("topic") or "",
		content=item.get("content") or "",
		send_date=item["sendDate"],
		read_date=item.get("readDate"),
		is_any_file_attached=parse_bool(item.get("isAnyFileAttached")),
		tags=list(item.get("tags") or []),
		category=parse_optional_str(item.get("category")),
	)


def parse_inbox_messages(data: Any) -> List[InboxMessage]:
	data = _require_dict(data, "inbox response")
	return [_parse_inbox_message(item) for item in _require_list(data["data"], "data")]


def _parse_outbox_message(item: Dict[str, Any]) -> OutboxMessage:
	item = _require_dict(item, "outbox message")
	return OutboxMessage(
		message_id=_required_id(item, "messageId"),
		receiver_first_name=item.get("receiverFirstName") or "",
		receiver_last_name=item.get("receiverLastName") or "",
		receiver_name=item["receiverName"],
		topic=item.get("topic") or "",
		content=item.get("content") or "",
		send_date=item["sendDate"],
		is_any_file_attached=parse_bool(item.get("isAnyFileAttached")),
		tags=list(item.get("tags") or []),
		category=parse_optional_str(item.get("category")),
	)


def parse_outbox_messages(data: Any) -> List[OutboxMessage]:
	data = _require_dict(data, "outbox response")
	return [_parse_outbox_message(item) for item in _require_list(data["data"], "data")]


def parse_message_detail(data: Any) -> MessageDetail:
	"""Parse a full message from the messaging API.

	Args:
		data: Decoded response body

	Returns:
		MessageDetail object
	"""
	data = _require_dict(data, "message response")
	item = _require_dict(data["data"], "data")
	attachments = []
	for raw in item.get("attachments") or []:
		raw = _require_dict(raw, "attachment")
		attachments.append(Attachment(
			id=_required_id(raw, "id"),
			name=raw.get("name") or "",
			size=parse_int(raw.get("size")),
		))
	return MessageDetail(
		message_id=_required_id(item, "messageId"),
		sender_first_name=item.get("senderFirstName") or "",
		sender_last_name=item.get("senderLastName") or "",
		sender_name=item["senderName"],
		topic=item.get("topic") or "",
		message=item.get("Message") or item.get("message") or "",
		send_date=item["sendDate"],
		sender_id=parse_id(item.get("senderId")),
		sender_group=parse_optional_str(item.get("senderGroup")),
		read_date=item.get("readDate"),
		attachments=attachments,
		receivers_count=parse_int(item.get("receiversCount")),
		no_reply=parse_bool(item.get("noReply")),
		archive=parse_bool(item.get("archive")),
	)
