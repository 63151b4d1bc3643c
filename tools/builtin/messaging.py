"""
Messaging Tools
---------------
email, sms, slack. All need provider credentials, so each is a stub that
answers with what it would take to enable it.
"""

from typing import List

from infra.config import ToolSettings

from ..registry import Category, Tool, stub_tool
from ..schema import bool_param, object_schema, string_param


def build_tools(settings: ToolSettings) -> List[Tool]:
    return [
        stub_tool(
            name="email",
            description="Send an email",
            category=Category.MESSAGING,
            parameters=object_schema({
                "to": string_param("Recipient email address"),
                "subject": string_param("Email subject"),
                "body": string_param("Email body (plain text or HTML)"),
                "html": bool_param("Send as HTML email", default=False),
                "cc": string_param("CC recipients (comma-separated)"),
                "bcc": string_param("BCC recipients (comma-separated)"),
            }, required=["to", "subject", "body"]),
            message="Email sending requires SMTP or an email API (SendGrid, SES) to be configured",
            requires_auth=True,
        ),
        stub_tool(
            name="sms",
            description="Send an SMS message",
            category=Category.MESSAGING,
            parameters=object_schema({
                "to": string_param("Recipient phone number"),
                "message": string_param("SMS message content"),
                "from": string_param("Sender phone number (if applicable)"),
            }, required=["to", "message"]),
            message="SMS sending requires an SMS provider (Twilio, SNS) to be configured",
            requires_auth=True,
        ),
        stub_tool(
            name="slack",
            description="Post a message to a Slack channel",
            category=Category.MESSAGING,
            parameters=object_schema({
                "channel": string_param("Slack channel (e.g., '#general')"),
                "message": string_param("Message text"),
                "webhook": string_param("Webhook URL (optional if using API token)"),
                "username": string_param("Bot username to display"),
            }, required=["channel", "message"]),
            message="Slack messaging requires a bot token or incoming webhook to be configured",
            requires_auth=True,
        ),
    ]
