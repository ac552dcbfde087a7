import logging

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Prefetch
from django.utils import timezone

from .errors import AuthorNotFound, NoCandidate, NotAssigned, NotFound, PRExists, PRMerged, TeamExists
from .models import Team, User, PullRequest
from .random_source import ReviewerPicker, get_default_picker

logger = logging.getLogger(__name__)


class TeamService:
    """
    Сервис для управления командами и пользователями
    """

    @classmethod
    @transaction.atomic
    def create_team_with_members(cls, team_name: str, members_data: list) -> Team:
        """
        Создает команду с пользователями. Пользователи с уже известными ID
        обновляются на месте и переезжают в новую команду.

        Args:
            team_name: Название команды
            members_data: Список данных пользователей (user_id, username, is_active)

        Returns:
            Team: Созданная команда

        Raises:
            TeamExists: Если команда уже существует
        """
        if Team.objects.filter(name=team_name).exists():
            raise TeamExists()

        try:
            with transaction.atomic():
                team = Team.objects.create(name=team_name)
        except IntegrityError as e:
            # команду успели создать параллельным запросом
            raise TeamExists() from e

        for member_data in members_data:
            cls._create_or_update_user(team, member_data)

        logger.info("team created team_name=%s members=%d", team_name, len(members_data))
        return team

    @classmethod
    def _create_or_update_user(cls, team: Team, member_data: dict) -> User:
        user, _ = User.objects.update_or_create(
            id=member_data['user_id'],
            defaults={
                'username': member_data['username'],
                'is_active': member_data['is_active'],
                'team': team,
            }
        )
        return user

    @classmethod
    def get_team_with_members(cls, team_name: str) -> Team:
        try:
            return Team.objects.prefetch_related(
                Prefetch('members', queryset=User.objects.order_by('id'))
            ).get(name=team_name)
        except Team.DoesNotExist:
            raise NotFound(f"Team '{team_name}' not found")

    @classmethod
    def list_active_teammates(cls, team_name: str, exclude_ids=()) -> list:
        return list(User.objects.active_teammates(team_name, exclude_ids))


class UserService:
    """
    Сервис для управления пользователями
    """

    @classmethod
    def set_user_active_status(cls, user_id: str, is_active: bool) -> User:
        try:
            user = User.objects.select_related('team').get(id=user_id)
        except User.DoesNotExist:
            raise NotFound(f"User '{user_id}' not found")

        user.is_active = is_active
        user.save(update_fields=['is_active', 'updated_at'])

        logger.info("user activity updated user_id=%s is_active=%s", user_id, is_active)
        return user

    @classmethod
    def get_user_review_assignments(cls, user_id: str) -> list:
        """
        PR'ы, где пользователь назначен ревьювером, сначала самые новые
        """
        if not User.objects.filter(id=user_id).exists():
            raise NotFound(f"User '{user_id}' not found")

        return list(PullRequest.objects.reviewed_by(user_id).select_related('author'))


class PullRequestService:
    """
    Сервис для управления Pull Request'ами.

    Все мутации идут в одной транзакции, а решения принимаются
    по состоянию, прочитанному внутри нее. picker можно передать явно
    (в тестах), иначе используется общий для процесса.
    """

    @classmethod
    @transaction.atomic
    def create_pull_request(cls, pr_id: str, pr_name: str, author_id: str,
                            picker: ReviewerPicker = None) -> PullRequest:
        """
        Создает PR и автоматически назначает до REVIEWERS_PER_PR ревьюверов
        из команды автора

        Raises:
            AuthorNotFound: Если автор не найден
            PRExists: Если PR с таким ID уже существует
        """
        try:
            author = User.objects.get(id=author_id)
        except User.DoesNotExist:
            raise AuthorNotFound(f"Author '{author_id}' not found")

        reviewers = cls._assign_reviewers(author, picker)

        if PullRequest.objects.filter(id=pr_id).exists():
            raise PRExists()

        try:
            with transaction.atomic():
                pr = PullRequest.objects.create(
                    id=pr_id,
                    name=pr_name,
                    author=author
                )
        except IntegrityError as e:
            raise PRExists() from e

        for position, reviewer in enumerate(reviewers):
            pr.add_reviewer(reviewer, position)

        logger.info(
            "PR created pr_id=%s author_id=%s reviewers_count=%d",
            pr_id, author_id, len(reviewers)
        )
        return PullRequest.objects.with_reviewers().get(id=pr_id)

    @classmethod
    def _assign_reviewers(cls, author: User, picker: ReviewerPicker = None) -> list:
        # Активные пользователи из команды автора, исключая самого автора
        available_reviewers = User.objects.active_teammates(author.team_id, exclude_ids=[author.id])

        picker = picker or get_default_picker()
        return picker.sample(available_reviewers, settings.REVIEWERS_PER_PR)

    @classmethod
    @transaction.atomic
    def merge_pull_request(cls, pr_id: str) -> PullRequest:
        """
        Помечает PR как MERGED. Повторный вызов ничего не меняет.

        Raises:
            NotFound: Если PR не найден
        """
        try:
            pr = PullRequest.objects.locked(pr_id)
        except PullRequest.DoesNotExist:
            raise NotFound(f"PR '{pr_id}' not found")

        if not pr.is_merged:
            pr.status = PullRequest.Status.MERGED
            pr.merged_at = timezone.now()
            pr.save(update_fields=['status', 'merged_at'])
            logger.info("PR merged pr_id=%s", pr_id)

        return PullRequest.objects.with_reviewers().get(id=pr_id)

    @classmethod
    @transaction.atomic
    def reassign_reviewer(cls, pr_id: str, old_user_id: str, picker: ReviewerPicker = None) -> tuple:
        """
        Переназначает конкретного ревьювера на другого из его команды.
        Новый ревьювер занимает место старого в списке.

        Returns:
            tuple: (PullRequest, новый ревьювер)

        Raises:
            NotFound: Если PR не найден
            PRMerged: Если PR уже смержен
            NotAssigned: Если пользователь не назначен ревьювером
            NoCandidate: Если в команде нет подходящей замены
        """
        try:
            pr = PullRequest.objects.locked(pr_id)
        except PullRequest.DoesNotExist:
            raise NotFound(f"PR '{pr_id}' not found")

        if pr.is_merged:
            raise PRMerged()

        current_reviewer_ids = pr.reviewer_ids
        if old_user_id not in current_reviewer_ids:
            raise NotAssigned()

        old_reviewer = User.objects.get(id=old_user_id)

        available_candidates = User.objects.active_teammates(
            old_reviewer.team_id,
            exclude_ids={pr.author_id, old_user_id, *current_reviewer_ids}
        )
        candidates = list(available_candidates)
        if not candidates:
            raise NoCandidate()

        picker = picker or get_default_picker()
        new_reviewer = picker.choice(candidates)

        position = pr.remove_reviewer(old_user_id)
        pr.add_reviewer(new_reviewer, position)

        logger.info(
            "reviewer reassigned pr_id=%s old_reviewer=%s new_reviewer=%s",
            pr_id, old_user_id, new_reviewer.id
        )
        return PullRequest.objects.with_reviewers().get(id=pr_id), new_reviewer
