"""이메일 발송 유틸리티 — SMTP (aiosmtplib).

SMTP 설정은 config.py의 SMTP_* 환경 변수로 관리.
Mailer 인스턴스는 lifespan에서 생성되어 app.state에 보관되고 get_mailer 의존성으로 주입됨.
"""

from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib

from app.config import Settings


class Mailer:
    """SMTP 메일 발송기.

    Thin aiosmtplib wrapper bound to one set of SMTP settings.
    Provided to routers through ``app.api.deps.get_mailer``.
    """

    def __init__(self, config: Settings) -> None:
        self._config = config

    async def send(
        self,
        to: str,
        subject: str,
        html: str,
        text: str | None = None,
    ) -> None:
        """이메일 발송.

        Args:
            to: 수신자 이메일 주소
            subject: 제목
            html: HTML 본문
            text: 플레인텍스트 본문 (없으면 생략)
        """
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self._config.SMTP_FROM_NAME} <{self._config.SMTP_FROM_EMAIL}>"
        msg["To"] = to

        if text:
            msg.attach(MIMEText(text, "plain", "utf-8"))
        msg.attach(MIMEText(html, "html", "utf-8"))

        await aiosmtplib.send(
            msg,
            hostname=self._config.SMTP_HOST,
            port=self._config.SMTP_PORT,
            username=self._config.SMTP_USER or None,
            password=self._config.SMTP_PASSWORD or None,
            start_tls=True,
        )

    async def send_confirmation(self, to: str, link: str) -> None:
        """가입 확인 메일 — Account confirmation mail."""
        await self.send(
            to,
            "Confirm your account",
            f'<p>Welcome! Confirm your account by opening <a href="{link}">this link</a>.</p>'
            f"<p>The link expires in {self._config.CONFIRMATION_TOKEN_EXPIRE_MINUTES} minutes.</p>",
            text=f"Confirm your account: {link}",
        )

    async def send_password_reset(self, to: str, link: str) -> None:
        """비밀번호 재설정 메일 — Password reset mail."""
        await self.send(
            to,
            "Reset your password",
            f'<p>Reset your password by opening <a href="{link}">this link</a>.</p>'
            f"<p>The link expires in {self._config.PASSWORD_RESET_EXPIRE_MINUTES} minutes.</p>",
            text=f"Reset your password: {link}",
        )

