"""Static lookup tables for question analysis.

Everything here is plain data so the tables can be extended and tested
independently of the algorithms that read them.
"""

from dataclasses import dataclass, field

from .models import QuestionIntent, QuestionType


@dataclass(frozen=True)
class ServiceEntry:
    """A row of the AWS service lexicon."""

    name: str
    code: str
    category: str
    full_name: str
    aliases: tuple[str, ...] = field(default_factory=tuple)

    @property
    def short_full_name(self) -> str:
        """Full name without the Amazon/AWS prefix."""
        for prefix in ("Amazon ", "AWS "):
            if self.full_name.startswith(prefix):
                return self.full_name[len(prefix):]
        return self.full_name

    def terms(self) -> list[str]:
        """All spellings that identify this service, lower-cased."""
        found = [self.full_name, self.short_full_name, self.name, *self.aliases, self.code]
        seen: list[str] = []
        for term in found:
            if term.lower() not in seen:
                seen.append(term.lower())
        return seen


SERVICES: tuple[ServiceEntry, ...] = (
    ServiceEntry("EC2", "ec2", "compute", "Amazon Elastic Compute Cloud"),
    ServiceEntry("S3", "s3", "storage", "Amazon Simple Storage Service"),
    ServiceEntry("Lambda", "lambda", "compute", "AWS Lambda"),
    ServiceEntry("RDS", "rds", "database", "Amazon Relational Database Service"),
    ServiceEntry("DynamoDB", "dynamodb", "database", "Amazon DynamoDB", ("dynamo db",)),
    ServiceEntry("Aurora", "aurora", "database", "Amazon Aurora"),
    ServiceEntry("ElastiCache", "elasticache", "database", "Amazon ElastiCache"),
    ServiceEntry("VPC", "vpc", "networking", "Amazon Virtual Private Cloud"),
    ServiceEntry("API Gateway", "apigateway", "networking", "Amazon API Gateway"),
    ServiceEntry("CloudFront", "cloudfront", "networking", "Amazon CloudFront"),
    ServiceEntry("Route 53", "route53", "networking", "Amazon Route 53"),
    ServiceEntry("IAM", "iam", "security", "AWS Identity and Access Management"),
    ServiceEntry("KMS", "kms", "security", "AWS Key Management Service"),
    ServiceEntry("Secrets Manager", "secretsmanager", "security", "AWS Secrets Manager"),
    ServiceEntry("CloudFormation", "cloudformation", "management", "AWS CloudFormation", ("cloud formation",)),
    ServiceEntry("CloudWatch", "cloudwatch", "monitoring", "Amazon CloudWatch", ("cloud watch",)),
    ServiceEntry("CDK", "cdk", "developer-tools", "AWS Cloud Development Kit"),
    ServiceEntry("Amplify", "amplify", "frontend", "AWS Amplify"),
    ServiceEntry("ECS", "ecs", "containers", "Amazon Elastic Container Service"),
    ServiceEntry("EKS", "eks", "containers", "Amazon Elastic Kubernetes Service"),
    ServiceEntry("SQS", "sqs", "application-integration", "Amazon Simple Queue Service"),
    ServiceEntry("SNS", "sns", "application-integration", "Amazon Simple Notification Service"),
    ServiceEntry("Step Functions", "stepfunctions", "application-integration", "AWS Step Functions"),
    ServiceEntry("Kinesis", "kinesis", "analytics", "Amazon Kinesis"),
    ServiceEntry("Redshift", "redshift", "analytics", "Amazon Redshift"),
    ServiceEntry("Elastic Beanstalk", "elasticbeanstalk", "compute", "AWS Elastic Beanstalk", ("beanstalk",)),
    ServiceEntry("SageMaker", "sagemaker", "machine-learning", "Amazon SageMaker"),
    ServiceEntry("Bedrock", "bedrock", "machine-learning", "Amazon Bedrock"),
)

SERVICES_BY_CODE: dict[str, ServiceEntry] = {service.code: service for service in SERVICES}

# Abbreviations expanded by the normalizer. Expansions must not themselves
# match a key, otherwise normalization stops being idempotent.
ABBREVIATIONS: dict[str, str] = {
    "ec2": "EC2",
    "s3": "S3",
    "rds": "RDS",
    "vpc": "VPC",
    "iam": "IAM",
    "kms": "KMS",
    "sqs": "SQS",
    "sns": "SNS",
    "ecs": "ECS",
    "eks": "EKS",
    "cdk": "CDK",
    "ddb": "DynamoDB",
    "dynamodb": "DynamoDB",
    "api gw": "API Gateway",
    "apigw": "API Gateway",
    "apigateway": "API Gateway",
    "cfn": "CloudFormation",
    "cloudformation": "CloudFormation",
    "cw": "CloudWatch",
    "cloudwatch": "CloudWatch",
    "cloudfront": "CloudFront",
    "elasticache": "ElastiCache",
    "sagemaker": "SageMaker",
    "elb": "Elastic Load Balancing",
    "alb": "Application Load Balancer",
    "nlb": "Network Load Balancer",
    "asg": "Auto Scaling group",
    "nacl": "network ACL",
    "igw": "internet gateway",
    "dx": "Direct Connect",
}

MISSPELLINGS: dict[str, str] = {
    "lamda": "Lambda",
    "labmda": "Lambda",
    "lambada": "Lambda",
    "dynamo db": "DynamoDB",
    "dynamo": "DynamoDB",
    "dyanmodb": "DynamoDB",
    "dynamdb": "DynamoDB",
    "cloudfrount": "CloudFront",
    "cloudfromation": "CloudFormation",
    "cloudformaton": "CloudFormation",
    "cloudwach": "CloudWatch",
    "elasticcache": "ElastiCache",
    "kinesys": "Kinesis",
    "sagemacker": "SageMaker",
    "beanstalck": "Beanstalk",
}

AWS_KEYWORDS: tuple[str, ...] = (
    "aws",
    "amazon",
    "cloud",
    "serverless",
    "bucket",
    "instance",
    "region",
    "availability zone",
    "container",
    "kubernetes",
    "docker",
    "elastic",
    "load balancer",
    "security group",
    "subnet",
    "cli",
    "sdk",
    "boto3",
    "console",
)

# Regex patterns per question type. Each pattern that matches adds one point.
QUESTION_TYPE_PATTERNS: dict[QuestionType, tuple[str, ...]] = {
    QuestionType.TROUBLESHOOTING: (
        r"\berrors?\b",
        r"\bfail(?:s|ed|ing|ure)?\b",
        r"\btime ?outs?\b|\btimed out\b",
        r"\bnot working\b|\bdoesn'?t work\b|\bisn'?t working\b",
        r"\b(?:troubleshoot\w*|debug\w*)\b",
        r"\bexceptions?\b",
        r"\b(?:denied|throttl\w+|crash\w*|broken)\b",
        r"\b(?:issue|problem)s?\b",
    ),
    QuestionType.HOWTO: (
        r"\bhow (?:do|can|should|would) (?:i|we|you)\b",
        r"\bhow to\b",
        r"\bsteps?\b|\bstep[- ]by[- ]step\b",
        r"\b(?:tutorial|walkthrough|guide)\b",
        r"\bset ?up\b",
    ),
    QuestionType.TECHNICAL: (
        r"\b(?:api|cli|sdk|boto3)\b",
        r"`[^`]+`",
        r"\baws [a-z0-9]+ [a-z]+-[a-z-]+",
        r"--[a-z][\w-]+",
        r"\b[a-z]+_[a-z0-9_]+\b",
        r"\b\w+\(\)",
        r"\b(?:code|script|command|syntax|parameter|endpoint|method)s?\b",
    ),
    QuestionType.COMPARISON: (
        r"\bdifferences? between\b",
        r"\bvs\.?\b|\bversus\b",
        r"\bcompar(?:e|ed|ing|ison)\b",
        r"\b(?:better|alternative)s?\b",
        r"\bshould i use\b|\bwhich (?:one|service)\b",
    ),
    QuestionType.CONCEPTUAL: (
        r"\bwhat (?:is|are)\b",
        r"\bexplain\w*\b",
        r"\b(?:concept|overview|definition)s?\b",
        r"\bwhy (?:is|are|does|do)\b",
    ),
    QuestionType.PRICING: (
        r"\b(?:cost|costs|price|pricing|billing|charged?|fees?)\b",
        r"\b(?:cheap\w*|expensive|budget)\b",
        r"\bfree tier\b",
    ),
    QuestionType.SECURITY: (
        r"\b(?:security|secure)\b",
        r"\b(?:permissions?|polic(?:y|ies)|roles?)\b",
        r"\bencrypt\w*\b",
        r"\b(?:ssl|tls|certificates?|compliance)\b",
    ),
    QuestionType.PERFORMANCE: (
        r"\b(?:performance|optimi[sz]\w*)\b",
        r"\b(?:latency|throughput|slow|faster)\b",
        r"\bscal(?:e|ing|ability)\b",
        r"\bcold starts?\b",
    ),
    QuestionType.INTEGRATION: (
        r"\bintegrat\w*\b",
        r"\bconnect\w*\b",
        r"\btrigger\w*\b",
        r"\bevent[- ]driven\b",
    ),
}

DEFAULT_TYPE_PRIORITY: tuple[QuestionType, ...] = (
    QuestionType.TROUBLESHOOTING,
    QuestionType.HOWTO,
    QuestionType.TECHNICAL,
    QuestionType.COMPARISON,
    QuestionType.CONCEPTUAL,
    QuestionType.PRICING,
    QuestionType.SECURITY,
    QuestionType.PERFORMANCE,
    QuestionType.INTEGRATION,
)

TYPE_INTENTS: dict[QuestionType, QuestionIntent] = {
    QuestionType.TROUBLESHOOTING: QuestionIntent.TROUBLESHOOT,
    QuestionType.HOWTO: QuestionIntent.IMPLEMENT,
    QuestionType.COMPARISON: QuestionIntent.COMPARE,
    QuestionType.PRICING: QuestionIntent.COST,
    QuestionType.SECURITY: QuestionIntent.SECURE,
    QuestionType.PERFORMANCE: QuestionIntent.OPTIMIZE,
    QuestionType.INTEGRATION: QuestionIntent.IMPLEMENT,
}

INTENT_PATTERNS: tuple[tuple[str, QuestionIntent], ...] = (
    (r"\b(?:migrat\w+|move|transfer)\b", QuestionIntent.MIGRATE),
    (r"\b(?:monitor\w*|observ\w+|alert\w*|track)\b", QuestionIntent.MONITOR),
    (r"\b(?:optimi[sz]\w*|improve|efficient)\b", QuestionIntent.OPTIMIZE),
)

# Documentation backend topics
GENERAL_TOPIC = "general"

ALL_TOPICS: tuple[str, ...] = (
    "reference_documentation",
    "current_awareness",
    "troubleshooting",
    "amplify_docs",
    "cdk_docs",
    "cdk_constructs",
    "cloudformation",
    GENERAL_TOPIC,
)

TYPE_TOPICS: dict[QuestionType, tuple[str, ...]] = {
    QuestionType.TROUBLESHOOTING: ("troubleshooting", "reference_documentation"),
    QuestionType.HOWTO: ("general", "reference_documentation"),
    QuestionType.TECHNICAL: ("reference_documentation", "general"),
    QuestionType.CONCEPTUAL: ("general",),
    QuestionType.COMPARISON: ("general",),
    QuestionType.PRICING: ("general",),
    QuestionType.SECURITY: ("general", "reference_documentation"),
    QuestionType.PERFORMANCE: ("general", "troubleshooting"),
    QuestionType.INTEGRATION: ("general", "reference_documentation"),
}

SERVICE_TOPICS: dict[str, tuple[str, ...]] = {
    "cdk": ("cdk_docs", "cdk_constructs"),
    "cloudformation": ("cloudformation",),
    "amplify": ("amplify_docs",),
}

STOP_WORDS: frozenset[str] = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "can", "do", "does",
        "for", "from", "how", "i", "in", "is", "it", "my", "of", "on", "or",
        "should", "that", "the", "this", "to", "use", "using", "was", "we",
        "what", "when", "where", "which", "why", "will", "with", "you", "your",
    }
)

ENTITY_PATTERNS: tuple[tuple[str, str, float], ...] = (
    ("aws_region", r"\b(?:us|eu|ap|ca|sa|me|af)-(?:east|west|north|south|central|northeast|southeast)-\d\b", 0.95),
    ("instance_type", r"\b[a-z]\d[a-z]?\.(?:nano|micro|small|medium|large|\d*xlarge)\b", 0.9),
    (
        "programming_language",
        r"\b(?:python|javascript|typescript|java|node\.?js|golang|rust|c#|php|ruby|kotlin)\b",
        0.8,
    ),
    (
        "error_code",
        r"\b(?:AccessDenied\w*|ThrottlingException|ValidationException|ResourceNotFound\w*|"
        r"InvalidParameter\w*|ProvisionedThroughputExceeded\w*|[45]\d\d)\b",
        0.85,
    ),
)
