# practice_scheduler/services/calendar/google_calendar_service.py
import asyncio
from datetime import timedelta, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from practice_scheduler.config.settings import get_settings
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import Error as GoogleApiClientError, HttpError
from httplib2 import HttpLib2Error
from cryptography.fernet import Fernet, InvalidToken
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging
from practice_scheduler.core.exceptions import CalendarProviderError
from practice_scheduler.models import CalendarIntegration
from practice_scheduler.schemas.calendar_events import CalendarEventResult, ExternalBusyEvent

settings = get_settings()

logger = logging.getLogger(__name__)


class GoogleCalendarService:
    """Google Calendar access for one practitioner at a time, keyed by user id"""

    SCOPES = ['https://www.googleapis.com/auth/calendar']
    TOKEN_URI = "https://oauth2.googleapis.com/token"
    PAGE_SIZE = 2500

    def __init__(self, db: Session):
        self.db = db
        self.fernet = Fernet(settings.CALENDAR_ENCRYPTION_KEY.encode()) if settings.CALENDAR_ENCRYPTION_KEY else None

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def get_integration(self, user_id) -> Optional[CalendarIntegration]:
        return self.db.query(CalendarIntegration).filter_by(
            user_id=user_id,
            provider='google',
            is_active=True
        ).first()

    def get_valid_credentials(self, integration: CalendarIntegration) -> Credentials:
        """Get valid credentials, refreshing if necessary"""
        if self.fernet is None:
            raise CalendarProviderError("CALENDAR_ENCRYPTION_KEY is not configured")

        now = datetime.now(timezone.utc)
        try:
            if integration.token_expires_at is None or integration.token_expires_at <= now + timedelta(minutes=5):
                return self.refresh_access_token(integration)
            access_token = self.fernet.decrypt(integration.access_token_encrypted).decode()
            refresh_token = self.fernet.decrypt(integration.refresh_token_encrypted).decode()
        except InvalidToken:
            raise CalendarProviderError(f"Stored calendar tokens for user {integration.user_id} cannot be decrypted")

        return Credentials(
            token=access_token,
            refresh_token=refresh_token,
            token_uri=self.TOKEN_URI,
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET
        )

    def refresh_access_token(self, integration: CalendarIntegration) -> Credentials:
        """Refresh expired access token using refresh token"""
        refresh_token = self.fernet.decrypt(integration.refresh_token_encrypted).decode()
        credentials = Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=self.TOKEN_URI,
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET
        )
        try:
            credentials.refresh(Request())
        except GoogleAuthError as e:
            integration.last_sync_status = 'failed'
            self._commit_sync_state(integration)
            raise CalendarProviderError(f"Token refresh failed for user {integration.user_id}: {e}")

        integration.access_token_encrypted = self.fernet.encrypt(credentials.token.encode())
        integration.token_expires_at = credentials.expiry.replace(tzinfo=timezone.utc) if credentials.expiry else None
        self._commit_sync_state(integration)
        logger.info(f"Refreshed Google access token for user {integration.user_id}")
        return credentials

    def _commit_sync_state(self, integration: CalendarIntegration) -> None:
        """Persist token and sync bookkeeping; a failed write only costs a refresh next time"""
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.warning(f"Could not store calendar sync state for user {integration.user_id}: {e}")

    async def _execute(self, integration: CalendarIntegration, make_request: Callable[[Any], Any]) -> Dict:
        """Build the API client and run one request off the event loop"""
        credentials = self.get_valid_credentials(integration)

        def _sync_call():
            service = build('calendar', 'v3', credentials=credentials, cache_discovery=False)
            return make_request(service).execute()

        loop = asyncio.get_event_loop()
        try:
            return await loop.run_in_executor(None, _sync_call)
        except HttpError as e:
            raise CalendarProviderError(f"Google Calendar API error {e.resp.status}: {e}", status_code=int(e.resp.status))
        except (GoogleAuthError, GoogleApiClientError, HttpLib2Error, OSError) as e:
            raise CalendarProviderError(f"Google Calendar unreachable: {e}")

    # ------------------------------------------------------------------
    # Busy events
    # ------------------------------------------------------------------

    async def get_busy_events_for_range(self, user_id, start: datetime, end: datetime) -> List[ExternalBusyEvent]:
        """
        Timed events of the practitioner's calendar overlapping [start, end).

        Recurring events are expanded. A practitioner without a connected
        calendar has no external busy time. Raises CalendarProviderError when
        Google cannot be queried.
        """
        try:
            integration = self.get_integration(user_id)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise CalendarProviderError(f"Calendar integration of user {user_id} could not be loaded: {e}")
        if not integration:
            logger.debug(f"No Google calendar connected for user {user_id}")
            return []

        calendar_id = integration.calendar_id or settings.GOOGLE_CALENDAR_ID
        items: List[Dict] = []
        page_token = None

        while True:
            response = await self._execute(
                integration,
                lambda service, token=page_token: service.events().list(
                    calendarId=calendar_id,
                    timeMin=start.astimezone(timezone.utc).isoformat(),
                    timeMax=end.astimezone(timezone.utc).isoformat(),
                    singleEvents=True,
                    orderBy='startTime',
                    maxResults=self.PAGE_SIZE,
                    pageToken=token,
                )
            )
            items.extend(response.get('items', []))
            page_token = response.get('nextPageToken')
            if not page_token:
                break

        integration.last_sync_at = datetime.now(timezone.utc)
        integration.last_sync_status = 'success'
        self._commit_sync_state(integration)

        events = self.parse_busy_events(items)
        logger.info(f"Fetched {len(events)} busy events from Google for user {user_id}")
        return events

    @staticmethod
    def parse_busy_events(items: List[Dict]) -> List[ExternalBusyEvent]:
        """Keep timed, opaque, non-declined events"""
        events = []
        for item in items:
            if item.get('status') == 'cancelled':
                continue
            if item.get('transparency') == 'transparent':
                continue

            start_str = item.get('start', {}).get('dateTime')
            end_str = item.get('end', {}).get('dateTime')
            if not start_str or not end_str:
                # All-day events carry only a date
                continue

            declined = any(
                attendee.get('self') and attendee.get('responseStatus') == 'declined'
                for attendee in item.get('attendees', [])
            )
            if declined:
                continue

            start = datetime.fromisoformat(start_str.replace('Z', '+00:00'))
            end = datetime.fromisoformat(end_str.replace('Z', '+00:00'))
            if start.tzinfo is None:
                start = start.replace(tzinfo=timezone.utc)
            if end.tzinfo is None:
                end = end.replace(tzinfo=timezone.utc)
            if end <= start:
                continue

            events.append(ExternalBusyEvent(
                external_id=item['id'],
                start=start,
                end=end,
                summary=item.get('summary'),
            ))

        events.sort(key=lambda e: e.start)
        return events

    # ------------------------------------------------------------------
    # Event writes
    # ------------------------------------------------------------------

    async def create_event(self, user_id, body: Dict, send_updates: str = 'none') -> CalendarEventResult:
        """Insert an event; a missing integration is reported, not raised"""
        integration = self.get_integration(user_id)
        if not integration:
            return CalendarEventResult(success=False, error="Google Calendar not connected")

        calendar_id = integration.calendar_id or settings.GOOGLE_CALENDAR_ID
        created = await self._execute(
            integration,
            lambda service: service.events().insert(
                calendarId=calendar_id,
                body=body,
                conferenceDataVersion=1 if 'conferenceData' in body else 0,
                sendUpdates=send_updates,
            )
        )
        logger.info(f"Created Google event {created.get('id')} for user {user_id}")
        return CalendarEventResult(
            success=True,
            google_event_id=created.get('id'),
            meet_link=created.get('hangoutLink'),
        )

    async def patch_event(self, user_id, google_event_id: str, body: Dict, send_updates: str = 'all') -> CalendarEventResult:
        integration = self.get_integration(user_id)
        if not integration:
            return CalendarEventResult(success=False, error="Google Calendar not connected")

        calendar_id = integration.calendar_id or settings.GOOGLE_CALENDAR_ID
        updated = await self._execute(
            integration,
            lambda service: service.events().patch(
                calendarId=calendar_id,
                eventId=google_event_id,
                body=body,
                conferenceDataVersion=1 if 'conferenceData' in body else 0,
                sendUpdates=send_updates,
            )
        )
        logger.info(f"Updated Google event {google_event_id} for user {user_id}")
        return CalendarEventResult(
            success=True,
            google_event_id=updated.get('id', google_event_id),
            meet_link=updated.get('hangoutLink'),
        )

    async def delete_event(self, user_id, google_event_id: str, send_updates: str = 'all') -> bool:
        """Delete an event; an event already gone counts as deleted"""
        integration = self.get_integration(user_id)
        if not integration:
            return False

        calendar_id = integration.calendar_id or settings.GOOGLE_CALENDAR_ID
        try:
            await self._execute(
                integration,
                lambda service: service.events().delete(
                    calendarId=calendar_id,
                    eventId=google_event_id,
                    sendUpdates=send_updates,
                )
            )
        except CalendarProviderError as e:
            if e.status_code in (404, 410):
                logger.info(f"Google event {google_event_id} already deleted")
                return True
            raise
        logger.info(f"Deleted Google event {google_event_id} for user {user_id}")
        return True
