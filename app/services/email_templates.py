"""HTML bodies for outgoing email. Each builder returns (subject, html)."""

from datetime import date, datetime
from html import escape
from typing import Tuple, Union


def format_meeting_date(value: Union[date, str, None]) -> str:
    """'Tuesday, October 20, 2026' style date, or a placeholder."""
    if not value:
        return "Date not specified"
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value)
        except ValueError:
            return escape(value)
    return f"{value.strftime('%A, %B')} {value.day}, {value.year}"


def consultation_confirmation(booking: dict, meeting_link: str) -> Tuple[str, str]:
    subject = "Consultation Confirmation – CareerCraft Expert Session"
    html = f"""
    <div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
      <h2>Your Consultation is Confirmed!</h2>
      <p>Hello <strong>{escape(booking.get("full_name") or "there")}</strong>,</p>
      <div style="background: #f8f9fa; padding: 15px; border-radius: 5px; margin: 20px 0;">
        <p><strong>Date:</strong> {format_meeting_date(booking.get("meeting_date"))}</p>
        <p><strong>Time:</strong> {escape(booking.get("meeting_time") or "Not specified")}</p>
        <p><strong>Mode:</strong> Online (Google Meet)</p>
        <p><strong>Join Link:</strong> <a href="{escape(meeting_link)}" target="_blank">Join Meeting</a></p>
      </div>
      <p>We're excited to guide you in choosing the best course aligned with your career goals.</p>
      <p>Best regards,<br><strong>The TalentConnect Team</strong></p>
    </div>
    """
    return subject, html


def consultation_admin_notice(booking: dict) -> Tuple[str, str]:
    subject = f"New Consultation: {booking.get('full_name') or 'New User'}"
    html = f"""
    <div style="font-family: Arial, sans-serif; line-height: 1.6; color: #333;">
      <h3>New Consultation Scheduled</h3>
      <p><strong>Name:</strong> {escape(booking.get("full_name") or "Not provided")}</p>
      <p><strong>Email:</strong> {escape(booking.get("email") or "Not provided")}</p>
      <p><strong>Phone:</strong> {escape(booking.get("phone") or "Not provided")}</p>
      <p><strong>Date:</strong> {format_meeting_date(booking.get("meeting_date"))}</p>
      <p><strong>Time:</strong> {escape(booking.get("meeting_time") or "Not specified")}</p>
      <p><strong>Consultation ID:</strong> {booking.get("id") or "N/A"}</p>
      <p><strong>Status:</strong> <em>Pending Confirmation</em></p>
    </div>
    """
    return subject, html


def registration_welcome(registration: dict) -> Tuple[str, str]:
    subject = "Welcome to TalentConnect CareerCraft – Your Journey Begins"
    name = escape(registration.get("full_name") or "Valued User")
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; color: #333; line-height: 1.6;">
      <h1 style="color: #2563eb;">Welcome to TalentConnect CareerCraft!</h1>
      <p>Dear {name},</p>
      <p>You've successfully registered for your chosen course. Your journey with us follows this path:</p>
      <div style="background: #f8fafc; padding: 20px; border-radius: 8px; margin: 20px 0;">
        <p><strong>Month 1: Learn</strong> - gain in-depth knowledge and skills from experts.</p>
        <p><strong>Month 2: Build</strong> - work on real-world projects.</p>
        <p><strong>Month 3: Release</strong> - showcase your final project and get evaluated.</p>
      </div>
      <p>After the course you'll step into a 3-month paid internship, which may convert into a full-time role.</p>
      <p>We'll share your batch start date and joining instructions shortly.</p>
      <p>Best Regards,<br><strong>Team TalentConnect</strong></p>
      <p style="font-size: 12px; color: #6b7280;">This is an automated message. &copy; {datetime.now().year} TalentConnect.</p>
    </div>
    """
    return subject, html
