from django.db import models


class Team(models.Model):
    name = models.CharField(max_length=100, primary_key=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'teams'


class UserQuerySet(models.QuerySet):

    def active_teammates(self, team_name: str, exclude_ids=()):
        """
        Активные участники команды, кроме переданных ID.
        Список исключений уходит в запрос одним параметром IN.
        """
        return self.filter(
            team_id=team_name,
            is_active=True
        ).exclude(id__in=list(exclude_ids)).order_by('id')


class User(models.Model):
    id = models.CharField(max_length=50, primary_key=True)
    username = models.CharField(max_length=100)
    team = models.ForeignKey(Team, on_delete=models.CASCADE, related_name='members')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserQuerySet.as_manager()

    def __str__(self):
        return f"{self.username} ({self.id})"

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['team', 'is_active'], name='idx_users_active'),
        ]


class PullRequestQuerySet(models.QuerySet):

    def with_reviewers(self):
        return self.select_related('author').prefetch_related(
            models.Prefetch(
                'assignments',
                queryset=ReviewerAssignment.objects.order_by('position')
            )
        )

    def locked(self, pr_id: str):
        """
        Загружает PR с блокировкой строки до конца транзакции.
        Вызывать только внутри transaction.atomic.
        """
        return self.select_for_update().get(id=pr_id)

    def reviewed_by(self, user_id: str):
        return self.filter(assignments__reviewer=user_id).order_by('-created_at')


class PullRequest(models.Model):
    class Status(models.TextChoices):
        OPEN = 'OPEN', 'Open'
        MERGED = 'MERGED', 'Merged'

    id = models.CharField(max_length=100, primary_key=True)
    name = models.CharField(max_length=200)
    author = models.ForeignKey(User, on_delete=models.CASCADE, related_name='authored_prs')
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.OPEN)
    reviewers = models.ManyToManyField(
        User,
        through='ReviewerAssignment',
        related_name='assigned_prs',
        blank=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    merged_at = models.DateTimeField(null=True, blank=True)

    objects = PullRequestQuerySet.as_manager()

    @property
    def is_merged(self) -> bool:
        return self.status == self.Status.MERGED

    @property
    def reviewer_ids(self) -> list:
        # assignments упорядочены по слоту в with_reviewers и в Meta
        return [assignment.reviewer_id for assignment in self.assignments.all()]

    def add_reviewer(self, reviewer: User, position: int) -> 'ReviewerAssignment':
        return ReviewerAssignment.objects.create(
            pull_request=self,
            reviewer=reviewer,
            position=position
        )

    def remove_reviewer(self, reviewer_id: str):
        """
        Удаляет назначение ревьювера и возвращает освободившийся слот
        (None, если ревьювер не был назначен)
        """
        assignment = ReviewerAssignment.objects.filter(
            pull_request=self,
            reviewer_id=reviewer_id
        ).first()
        if assignment is None:
            return None

        position = assignment.position
        assignment.delete()
        return position

    def __str__(self):
        return f"{self.name} ({self.id})"

    class Meta:
        db_table = 'pull_requests'
        indexes = [
            models.Index(fields=['status'], name='idx_pr_status'),
        ]


class ReviewerAssignment(models.Model):
    pull_request = models.ForeignKey(PullRequest, on_delete=models.CASCADE, related_name='assignments')
    reviewer = models.ForeignKey(User, on_delete=models.CASCADE, related_name='review_assignments')
    position = models.PositiveSmallIntegerField()
    assigned_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.pull_request_id} -> {self.reviewer_id} [{self.position}]"

    class Meta:
        db_table = 'pr_reviewers'
        ordering = ['position']
        constraints = [
            models.UniqueConstraint(fields=['pull_request', 'reviewer'], name='uniq_pr_reviewer'),
            models.UniqueConstraint(fields=['pull_request', 'position'], name='uniq_pr_reviewer_slot'),
        ]
