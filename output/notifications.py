"""Email notifications for pool events.

Renders the welcome (team pack), standings digest and period winners emails
and sends them over SMTP. Nothing is sent when SMTP is not configured.
Delivery failures are logged and never interrupt the action that
triggered them.
"""

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from html import escape
from typing import Callable

import config
from engine.events import AllocationDegraded, EventBus, ParticipantRegistered
from engine.standings import PeriodWinner, Standing
from models.participant import Participant
from models.team import Team

logger = logging.getLogger(__name__)


@dataclass
class EmailSettings:
    host: str = ""
    port: int = 587
    user: str = ""
    password: str = ""
    from_email: str = ""
    company_name: str = "March Madness"
    logo_url: str = ""

    @classmethod
    def from_config(cls) -> "EmailSettings":
        return cls(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            user=config.SMTP_USER,
            password=config.SMTP_PASS,
            from_email=config.FROM_EMAIL,
            company_name=config.COMPANY_NAME,
            logo_url=config.EMAIL_LOGO_URL,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.user and self.password)

    @property
    def sender(self) -> str:
        return self.from_email or self.user


def smtp_transport(settings: EmailSettings) -> Callable[[EmailMessage], None]:
    def send(message: EmailMessage):
        with smtplib.SMTP(settings.host, settings.port or 587) as server:
            server.starttls()
            server.login(settings.user, settings.password)
            server.send_message(message)
    return send


# --- Rendering ---

def _wrap_html(settings: EmailSettings, body: str) -> str:
    logo = ""
    if settings.logo_url:
        logo = (f'<img src="{escape(settings.logo_url)}" alt="Logo" '
                f'style="max-width: 200px; margin: 20px 0;">')
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f"{logo}{body}</div>"
    )


def _message(settings: EmailSettings, to: str, subject: str, text: str, html: str) -> EmailMessage:
    message = EmailMessage()
    message["From"] = settings.sender
    message["To"] = to
    message["Subject"] = f"{subject} - {settings.company_name} Challenge"
    message.set_content(text)
    message.add_alternative(_wrap_html(settings, html), subtype="html")
    return message


def _team_line(team: Team) -> str:
    return f"{team.name} ({team.seed} seed - {team.region})"


def render_welcome(settings: EmailSettings, participant: Participant,
                   bundle: list[Team]) -> EmailMessage:
    lines = [_team_line(t) for t in bundle]
    text = (
        f"Hi {participant.name},\n\n"
        f"You're all set! Here are your {len(bundle)} teams:\n\n"
        + "\n".join(f"  {line}" for line in lines)
        + "\n\nGood luck!\n"
    )
    html = (
        "<h2>Welcome to the Team Pack Challenge!</h2>"
        f"<p>Hi {escape(participant.name)},</p>"
        f"<p>You're all set! Here are your {len(bundle)} teams:</p>"
        '<div style="background: #f5f5f5; padding: 15px; border-radius: 5px; margin: 20px 0;">'
        + "<br>".join(escape(line) for line in lines)
        + "</div><p>Good luck!</p>"
    )
    return _message(settings, participant.email, "Your Team Pack", text, html)


def render_standings(settings: EmailSettings, recipient: Participant,
                     standings: list[Standing], period: int) -> EmailMessage:
    text_rows = "\n".join(
        f"  {s.rank:2d}. {s.name:<25s} {s.cumulative_points:5d} {s.points:5d}" for s in standings
    )
    html_rows = "".join(
        f"<tr><td>{s.rank}</td><td>{escape(s.name)}</td>"
        f"<td>{s.cumulative_points}</td><td>{s.points}</td></tr>"
        for s in standings
    )
    text = (
        f"Hi {recipient.name},\n\nHere's where everyone stands (period {period}):\n\n"
        f"  Rank Name                      Overall  Period\n{text_rows}\n"
    )
    html = (
        "<h2>Today's Standings</h2>"
        f"<p>Hi {escape(recipient.name)},</p><p>Here's where everyone stands:</p>"
        '<table style="width: 100%; border-collapse: collapse; margin: 20px 0;">'
        "<thead><tr><th>Rank</th><th>Name</th><th>Overall</th><th>This Period</th></tr></thead>"
        f"<tbody>{html_rows}</tbody></table><p>Keep tracking your teams!</p>"
    )
    return _message(settings, recipient.email, "Daily Standings", text, html)


def render_period_winners(settings: EmailSettings, recipient: Participant,
                          winners: list[PeriodWinner], period: int) -> EmailMessage:
    text_rows = "\n".join(
        f"  {w.place}. {w.standing.name:<25s} {w.standing.points:5d}  ${w.payout}" for w in winners
    )
    html_rows = "".join(
        f"<tr><td>{w.place}</td><td>{escape(w.standing.name)}</td>"
        f"<td>{w.standing.points}</td><td>${w.payout}</td></tr>"
        for w in winners
    )
    text = (
        f"Hi {recipient.name},\n\nCongratulations to our period {period} winners:\n\n"
        f"{text_rows}\n\nKeep playing for the overall championship!\n"
    )
    html = (
        f"<h2>Period {period} Winners!</h2>"
        f"<p>Hi {escape(recipient.name)},</p>"
        f"<p>Congratulations to our period {period} winners:</p>"
        '<table style="width: 100%; border-collapse: collapse; margin: 20px 0;">'
        "<thead><tr><th>Place</th><th>Name</th><th>Points</th><th>Payout</th></tr></thead>"
        f"<tbody>{html_rows}</tbody></table><p>Keep playing for the overall championship!</p>"
    )
    return _message(settings, recipient.email, f"Period {period} Winners", text, html)


# --- Delivery ---

class EmailNotifier:
    """Delivers pool emails. Subscribe it to an EventBus to send welcome emails."""

    def __init__(self, settings: EmailSettings | None = None,
                 transport: Callable[[EmailMessage], None] | None = None):
        self.settings = settings or EmailSettings.from_config()
        self.transport = transport or smtp_transport(self.settings)

    def subscribe(self, bus: EventBus):
        bus.subscribe(ParticipantRegistered, self.on_participant_registered)
        bus.subscribe(AllocationDegraded, self.on_allocation_degraded)

    def on_participant_registered(self, event: ParticipantRegistered):
        self.deliver(render_welcome(self.settings, event.participant, event.bundle))

    def on_allocation_degraded(self, event: AllocationDegraded):
        logger.warning("Participant %s received a degraded team pack; "
                       "the bundle pool may be exhausted", event.participant_id)

    def send_standings(self, recipients: list[Participant], standings: list[Standing],
                       period: int) -> int:
        if not standings:
            return 0
        return sum(
            self.deliver(render_standings(self.settings, r, standings, period)) for r in recipients
        )

    def send_period_winners(self, recipients: list[Participant], winners: list[PeriodWinner],
                            period: int) -> int:
        if not winners:
            return 0
        return sum(
            self.deliver(render_period_winners(self.settings, r, winners, period))
            for r in recipients
        )

    def deliver(self, message: EmailMessage) -> bool:
        """Send one message. Returns False when skipped or when delivery failed."""
        if not self.settings.is_configured:
            logger.debug("SMTP not configured; skipping email to %s", message["To"])
            return False
        try:
            self.transport(message)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Error sending email to %s: %s", message["To"], exc)
            return False
        return True
