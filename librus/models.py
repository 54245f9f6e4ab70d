"""Data models for Librus entities."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .utils import decode_message_content, notice_content_to_text


@dataclass(frozen=True)
class Reference:
	"""A pointer to another API resource."""
	id: str
	url: Optional[str] = None


@dataclass(frozen=True)
class Grade:
	"""A student's grade."""
	id: str
	lesson: Reference
	subject: Reference
	student: Reference
	category: Reference
	added_by: Reference
	grade: str  # e.g. "5", "4+", "np"
	date: str
	add_date: str
	semester: int
	is_constituent: bool = False
	is_semester: bool = False
	is_semester_proposition: bool = False
	is_final: bool = False
	is_final_proposition: bool = False
	comments: List[Reference] = field(default_factory=list)
	improvement: Optional[Reference] = None
	resit: Optional[Reference] = None

	def __str__(self) -> str:
		return f"{self.grade} ({self.date})"


@dataclass(frozen=True)
class GradeCategory:
	"""Type of assessment a grade belongs to (test, quiz, homework)."""
	id: str
	name: str
	color: Optional[Reference] = None
	adults_extramural: bool = False
	adults_daily: bool = False
	standard: bool = False
	is_read_only: bool = False
	count_to_the_average: bool = False
	block_any_grades: bool = False
	obligation_to_perform: bool = False


@dataclass(frozen=True)
class GradeComment:
	"""A comment attached to a grade."""
	id: str
	added_by: Reference
	grade: Reference
	text: str


@dataclass(frozen=True)
class Lesson:
	"""Links a teacher, a subject and a class."""
	id: str
	teacher: Reference
	subject: Reference
	class_: Reference


@dataclass(frozen=True)
class Subject:
	"""An academic subject."""
	id: str
	name: str
	short: str
	no: Optional[int] = None
	is_extracurricular: Optional[bool] = None
	is_block_lesson: Optional[bool] = None

	def __str__(self) -> str:
		return f"{self.name} ({self.short})"


@dataclass(frozen=True)
class Attendance:
	"""A student's attendance record for one lesson."""
	id: str
	lesson: Reference
	student: Reference
	date: str
	add_date: str
	lesson_no: int
	semester: int
	type: Reference
	added_by: Reference
	trip: Optional[Reference] = None


@dataclass(frozen=True)
class AttendanceType:
	"""Kind of attendance (present, absent, late...)."""
	id: str
	name: str
	short: str
	standard: bool = False
	color_rgb: Optional[str] = None
	is_presence_kind: bool = False
	order: Optional[int] = None
	identifier: Optional[str] = None
	standard_type: Optional[Reference] = None
	color: Optional[Reference] = None


@dataclass(frozen=True)
class Classroom:
	"""A classroom."""
	id: str
	symbol: Optional[str] = None
	name: Optional[str] = None
	size: Optional[int] = None


@dataclass(frozen=True)
class Homework:
	"""A homework assignment or class event."""
	id: str
	content: str
	date: str
	category: Reference
	created_by: Reference
	lesson_no: Optional[str] = None
	time_from: Optional[str] = None
	time_to: Optional[str] = None
	class_: Optional[Reference] = None
	subject: Optional[Reference] = None
	add_date: Optional[str] = None
	classroom: Optional[Classroom] = None

	def __str__(self) -> str:
		return f"{self.date}: {self.content}"


@dataclass(frozen=True)
class Account:
	"""Account details of the logged in user."""
	id: str
	user_id: str
	first_name: str
	last_name: str
	login: str
	email: Optional[str] = None
	group_id: Optional[int] = None
	is_active: bool = False
	is_premium: bool = False
	is_premium_demo: bool = False
	expired_premium_date: Optional[int] = None
	premium_addons: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class UserProfile:
	"""Name of the logged in user."""
	first_name: str
	last_name: str


@dataclass(frozen=True)
class Me:
	"""Current user information: account, profile and class."""
	account: Account
	user: UserProfile
	class_: Optional[Reference] = None
	refresh: Optional[int] = None

	def __str__(self) -> str:
		return f"{self.user.first_name} {self.user.last_name}"


@dataclass(frozen=True)
class User:
	"""A user of the system (student, teacher or parent)."""
	id: str
	first_name: str
	last_name: str
	account_id: Optional[str] = None
	class_: Optional[Reference] = None
	class_uuid: Optional[str] = None
	unit: Optional[Reference] = None
	class_register_number: Optional[int] = None
	is_employee: bool = False
	group_id: Optional[int] = None

	@property
	def full_name(self) -> str:
		return f"{self.first_name} {self.last_name}".strip()


@dataclass(frozen=True)
class SchoolNotice:
	"""A school notice (announcement)."""
	id: str
	subject: str
	content: str  # HTML
	creation_date: str
	start_date: Optional[str] = None
	end_date: Optional[str] = None
	added_by: Optional[Reference] = None
	was_read: bool = False

	@property
	def text(self) -> str:
		"""Notice content with markup removed."""
		return notice_content_to_text(self.content)

	def __str__(self) -> str:
		return f"{self.subject} - {self.creation_date}"


@dataclass(frozen=True)
class TimetableEntry:
	"""A single lesson slot in the timetable."""
	lesson: Optional[Reference] = None
	subject: Optional[Subject] = None
	teacher: Optional[User] = None
	classroom: Optional[Reference] = None
	class_: Optional[Reference] = None
	lesson_no: Optional[int] = None
	hour_from: Optional[str] = None
	hour_to: Optional[str] = None
	is_canceled: bool = False
	is_substitution_class: bool = False

	def __str__(self) -> str:
		title = self.subject.name if self.subject else "lesson"
		if self.hour_from and self.hour_to:
			return f"{title} ({self.hour_from}-{self.hour_to})"
		return title


@dataclass(frozen=True)
class Timetable:
	"""One week of the timetable.

	``days`` maps an ISO date to its lesson slots; each slot holds the entries
	scheduled in it (usually zero or one).
	"""
	days: Dict[str, List[List[TimetableEntry]]] = field(default_factory=dict)
	next_page: Optional[str] = None
	prev_page: Optional[str] = None

	def entries_for(self, day: str) -> List[TimetableEntry]:
		"""Flatten the slots of one day."""
		return [entry for slot in self.days.get(day, []) for entry in slot]


@dataclass(frozen=True)
class UnreadCounts:
	"""Unread message counts across folders."""
	inbox: int = 0
	notes: int = 0
	alerts: int = 0
	substitutions: int = 0
	absences: int = 0
	justifications: int = 0
	trash: int = 0
	archive_inbox: int = 0
	archive_notes: int = 0
	archive_alerts: int = 0
	archive_substitutions: int = 0
	archive_absences: int = 0
	archive_justifications: int = 0
	archive_trash: int = 0


@dataclass(frozen=True)
class InboxMessage:
	"""A received message as listed in the inbox."""
	message_id: str
	sender_first_name: str
	sender_last_name: str
	sender_name: str
	topic: str
	content: str  # base64
	send_date: str
	read_date: Optional[str] = None
	is_any_file_attached: bool = False
	tags: List[str] = field(default_factory=list)
	category: Optional[str] = None

	@property
	def decoded_content(self) -> Optional[str]:
		return decode_message_content(self.content)

	@property
	def is_read(self) -> bool:
		return self.read_date is not None


@dataclass(frozen=True)
class OutboxMessage:
	"""A sent message as listed in the outbox."""
	message_id: str
	receiver_first_name: str
	receiver_last_name: str
	receiver_name: str
	topic: str
	content: str  # base64
	send_date: str
	is_any_file_attached: bool = False
	tags: List[str] = field(default_factory=list)
	category: Optional[str] = None

	@property
	def decoded_content(self) -> Optional[str]:
		return decode_message_content(self.content)


@dataclass(frozen=True)
class Attachment:
	"""A file attached to a message."""
	id: str
	name: str
	size: Optional[int] = None


@dataclass(frozen=True)
class MessageDetail:
	"""Full message including body and attachments."""
	message_id: str
	sender_first_name: str
	sender_last_name: str
	sender_name: str
	topic: str
	message: str  # base64
	send_date: str
	sender_id: Optional[str] = None
	sender_group: Optional[str] = None
	read_date: Optional[str] = None
	attachments: List[Attachment] = field(default_factory=list)
	receivers_count: Optional[int] = None
	no_reply: bool = False
	archive: bool = False

	@property
	def decoded_content(self) -> Optional[str]:
		return decode_message_content(self.message)
