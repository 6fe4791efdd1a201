import smtplib
import ssl
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import List, Optional, Dict, Any
from pathlib import Path
import logging
from jinja2 import Environment, FileSystemLoader, select_autoescape
from app.core.config import settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


class EmailService:
    """
    Servicio de correo electrónico con soporte para templates Jinja2.
    """

    def __init__(self):
        self.smtp_server = settings.EMAIL_SMTP_SERVER
        self.smtp_port = settings.EMAIL_SMTP_PORT
        self.username = settings.EMAIL_USERNAME
        self.password = settings.EMAIL_PASSWORD
        self.use_tls = settings.EMAIL_USE_TLS
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME
        self.frontend_url = settings.FRONTEND_URL

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(['html', 'xml'])
        )

    def _create_smtp_connection(self):
        """Crear conexión SMTP segura."""
        try:
            if self.use_tls:
                context = ssl.create_default_context()
                server = smtplib.SMTP(self.smtp_server, self.smtp_port)
                server.starttls(context=context)
            else:
                server = smtplib.SMTP_SSL(self.smtp_server, self.smtp_port)

            server.login(self.username, self.password)
            return server
        except Exception as e:
            logger.error(f"Error creating SMTP connection: {str(e)}")
            raise

    def render_template(self, template_name: str, context: Dict[str, Any]) -> str:
        """
        Renderizar template de email con contexto.

        Args:
            template_name: Nombre del archivo de template
            context: Variables para el template

        Returns:
            HTML renderizado del template
        """
        template = self.jinja_env.get_template(template_name)
        return template.render(frontend_url=self.frontend_url, **context)

    def send_email(
        self,
        to_emails: List[str],
        subject: str,
        html_content: Optional[str] = None,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Enviar correo electrónico.

        Returns:
            True si se envió correctamente, False en caso contrario
        """
        try:
            msg = MIMEMultipart('alternative')
            msg['Subject'] = subject
            msg['From'] = f"{self.from_name} <{self.from_email}>"
            msg['To'] = ', '.join(to_emails)

            if text_content:
                msg.attach(MIMEText(text_content, 'plain', 'utf-8'))
            if html_content:
                msg.attach(MIMEText(html_content, 'html', 'utf-8'))

            with self._create_smtp_connection() as server:
                server.sendmail(self.from_email, to_emails, msg.as_string())

            logger.info(f"Email sent successfully to {', '.join(to_emails)}")
            return True

        except Exception as e:
            logger.error(f"Error sending email: {str(e)}")
            return False

    def send_template_email(
        self,
        to_emails: List[str],
        subject: str,
        template_name: str,
        context: Dict[str, Any]
    ) -> bool:
        """Enviar correo usando template."""
        try:
            html_content = self.render_template(template_name, context)
        except Exception as e:
            logger.error(f"Error rendering template {template_name}: {str(e)}")
            return False

        return self.send_email(to_emails=to_emails, subject=subject, html_content=html_content)


# Singleton instance
email_service = EmailService()
