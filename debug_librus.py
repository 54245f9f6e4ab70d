#!/usr/bin/env python3
"""
Librus Debug Script

Logs in and walks through every endpoint of the client, printing a short
summary of what came back. Handy for checking the wire format after the
service changes something.

Usage:
    python3 debug_librus.py

The script will first try to load credentials from a .env file.
If no .env file is found or credentials are missing, you'll be prompted for them.

Create a .env file with:
    LIBRUS_USERNAME=your_login
    LIBRUS_PASSWORD=your_password_here
"""

import asyncio
import getpass
import logging
import os
import sys

# Try to load environment variables from .env file
try:
	from dotenv import load_dotenv
	load_dotenv()
except ImportError:
	print("💡 Tip: Install python-dotenv to use .env file for credentials:")
	print("    pip install python-dotenv")

from librus import LibrusClient, LibrusAuthError, LibrusError


async def debug_synergia(client: LibrusClient):
	"""Print a summary of the Synergia endpoints."""
	print("\n📚 Synergia API")
	print("=" * 50)

	me = await client.me()
	print(f"   User: {me}")

	grades = await client.grades()
	print(f"   Grades: {len(grades)}")
	if grades:
		grade = grades[0]
		category = await client.grade_category(grade.category.id)
		subject = await client.subject(grade.subject.id)
		print(f"   First grade: {grade} in {subject} [{category.name}]")

	attendances = await client.attendances()
	types = {t.id: t for t in await client.attendance_types()}
	print(f"   Attendances: {len(attendances)}")
	for attendance in attendances[:3]:
		kind = types.get(attendance.type.id)
		print(f"      {attendance.date} lesson {attendance.lesson_no}: {kind.name if kind else attendance.type.id}")

	homeworks = await client.homeworks()
	print(f"   Homeworks: {len(homeworks)}")

	timetable = await client.timetable()
	for day in sorted(timetable.days):
		entries = timetable.entries_for(day)
		print(f"      {day}: {', '.join(str(e) for e in entries) or 'no lessons'}")

	notices = await client.school_notices()
	print(f"   School notices: {len(notices)}")
	for notice in notices[:3]:
		print(f"      [{notice.creation_date}] {notice.subject} - {notice.text[:120]}")


async def debug_messages(client: LibrusClient):
	"""Print a summary of the messaging endpoints."""
	print("\n✉️ Messages API")
	print("=" * 50)

	unread = await client.unread_counts()
	print(f"   Unread inbox: {unread.inbox}, notes: {unread.notes}, alerts: {unread.alerts}")

	inbox = await client.inbox_messages(page=1, limit=5)
	for msg in inbox:
		preview = (msg.decoded_content or "")[:50]
		print(f"   [{msg.send_date}] {msg.sender_name} - {msg.topic} ({preview}...)")

	if inbox:
		detail = await client.message(inbox[0].message_id)
		print(f"\n   From: {detail.sender_name}")
		print(f"   Subject: {detail.topic}")
		print(f"   Content:\n{detail.decoded_content}")
		for attachment in detail.attachments:
			data = await client.attachment(attachment.id, detail.message_id)
			print(f"   📎 {attachment.name}: {len(data)} bytes")

	outbox = await client.outbox_messages(page=1, limit=5)
	print(f"\n   Outbox messages on first page: {len(outbox)}")


async def main():
	"""Main debug function."""
	print("Librus Debug Script\n")

	username = os.getenv("LIBRUS_USERNAME")
	password = os.getenv("LIBRUS_PASSWORD")

	if not username or not password:
		username = input("Librus login: ").strip()
		if not username:
			print("❌ Login is required!")
			return
		password = getpass.getpass("Librus password: ").strip()
		if not password:
			print("❌ Password is required!")
			return

	print("🔐 Authenticating with Librus...")
	try:
		async with await LibrusClient.builder().username(username).password(password).build() as client:
			print("✅ Authentication successful!")
			await debug_synergia(client)
			await debug_messages(client)
	except LibrusAuthError as e:
		print(f"❌ Authentication error: {e}")
		return
	except LibrusError as e:
		print(f"❌ API error: {e}")
		body = getattr(e, "body", None)
		if body:
			print(f"   Body: {body[:500]}")
		return

	print("\n✅ Debug complete!")


if __name__ == "__main__":
	logging.basicConfig(
		level=logging.DEBUG if "-v" in sys.argv else logging.INFO,
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
	)
	try:
		asyncio.run(main())
	except KeyboardInterrupt:
		print("\n\n⚠️ Debug interrupted by user.")
		sys.exit(1)
