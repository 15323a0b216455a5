"""HTML bodies for outbound e-mails."""

from datetime import datetime
from html import escape
from typing import List

import attrs


@attrs.define(frozen=True)
class EmailMessage:
    to: str
    subject: str
    body: str


_FOOTER = (
    '<p style="font-size:12px;color:#999;margin-top:40px;">'
    '&copy; {year} Movie Booking Inc.</p>'
)


def _format_show_time(show_time: datetime) -> str:
    return show_time.strftime('%a, %d %b %Y %H:%M %Z').strip()


def _button(href: str, label: str) -> str:
    return (
        f'<a href="{escape(href)}" style="display:inline-block;margin-top:20px;padding:12px 20px;'
        f'background-color:#e50914;color:white;text-decoration:none;border-radius:6px;">'
        f'{label}</a>'
    )


def booking_confirmation(
    *,
    to: str,
    user_name: str,
    movie_title: str,
    show_time: datetime,
    seats: List[str],
    amount: int,
    frontend_url: str,
) -> EmailMessage:
    title = escape(movie_title)
    body = f"""<div style="font-family: Arial, sans-serif; max-width: 600px; margin: auto; padding: 20px;">
  <h2 style="color: #e50914;">🎟️ Movie Booking Confirmed!</h2>
  <p>Hi <strong>{escape(user_name)}</strong>,</p>
  <p>Your booking has been confirmed. Here are the details:</p>
  <h3>{title}</h3>
  <p><strong>Show Time:</strong> {_format_show_time(show_time)}</p>
  <p><strong>Seats:</strong> {escape(', '.join(seats))}</p>
  <p><strong>Total Paid:</strong> ₹{amount}</p>
  {_button(f'{frontend_url.rstrip("/")}/my-bookings', 'View My Booking')}
  <p>Enjoy the show!</p>
  <p>Thanks for booking with us</p>
  {_FOOTER.format(year=datetime.now().year)}
</div>"""
    return EmailMessage(
        to=to, subject=f'Payment Confirmation: "{movie_title}" booked!', body=body
    )


def show_reminder(
    *, to: str, user_name: str, movie_title: str, show_time: datetime
) -> EmailMessage:
    body = f"""<div style="font-family: Arial, sans-serif; max-width: 600px; margin: auto; padding: 20px;">
  <h2 style="color: #e50914;">⏰ Your show starts soon</h2>
  <p>Hi <strong>{escape(user_name)}</strong>,</p>
  <p>This is a reminder that <strong>{escape(movie_title)}</strong> starts at
     <strong>{_format_show_time(show_time)}</strong>.</p>
  <p>Please arrive a little early to find your seats.</p>
  {_FOOTER.format(year=datetime.now().year)}
</div>"""
    return EmailMessage(
        to=to, subject=f'Reminder: Your movie "{movie_title}" starts soon!', body=body
    )


def new_show_announcement(
    *, to: str, user_name: str, movie_title: str, frontend_url: str
) -> EmailMessage:
    body = f"""<div style="font-family: Arial, sans-serif; max-width: 600px; margin: auto; padding: 20px;">
  <h2 style="color: #e50914;">🎬 New Show Added</h2>
  <p>Hi <strong>{escape(user_name)}</strong>,</p>
  <p>We have just added a new show for <strong>{escape(movie_title)}</strong>.</p>
  {_button(frontend_url, 'Book Now')}
  {_FOOTER.format(year=datetime.now().year)}
</div>"""
    return EmailMessage(to=to, subject=f'🎬 New Show Added: {movie_title}', body=body)
