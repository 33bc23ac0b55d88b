from rest_framework import serializers


class TeamMemberSerializer(serializers.Serializer):
    user_id = serializers.CharField(source='id')
    username = serializers.CharField()
    is_active = serializers.BooleanField()


class TeamSerializer(serializers.Serializer):
    team_name = serializers.CharField(source='name')
    members = TeamMemberSerializer(many=True)


class UserSerializer(serializers.Serializer):
    user_id = serializers.CharField(source='id')
    username = serializers.CharField()
    team_name = serializers.CharField()
    is_active = serializers.BooleanField()


class PullRequestSerializer(serializers.Serializer):
    pull_request_id = serializers.CharField(source='id')
    pull_request_name = serializers.CharField(source='name')
    author_id = serializers.CharField()
    status = serializers.CharField(source='status.value')
    assigned_reviewers = serializers.ListField(child=serializers.CharField())
    createdAt = serializers.DateTimeField(source='created_at', format='%Y-%m-%dT%H:%M:%SZ', allow_null=True)
    mergedAt = serializers.DateTimeField(source='merged_at', format='%Y-%m-%dT%H:%M:%SZ', allow_null=True)


class PullRequestShortSerializer(serializers.Serializer):
    pull_request_id = serializers.CharField(source='id')
    pull_request_name = serializers.CharField(source='name')
    author_id = serializers.CharField()
    status = serializers.CharField(source='status.value')


class TeamDeactivationResultSerializer(serializers.Serializer):
    team_name = serializers.CharField()
    deactivated_users = serializers.IntegerField()
    reassigned_prs = serializers.IntegerField()
    failed_reassignments = serializers.IntegerField()
    deactivated_user_ids = serializers.ListField(child=serializers.CharField())


class ReviewStatSerializer(serializers.Serializer):
    user_id = serializers.CharField()
    username = serializers.CharField()
    review_count = serializers.IntegerField()


class PRAssignmentStatSerializer(serializers.Serializer):
    pull_request_id = serializers.CharField(source='pr_id')
    pull_request_name = serializers.CharField(source='pr_name')
    reviewers_count = serializers.IntegerField()
