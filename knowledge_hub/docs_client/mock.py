"""In-process documentation client backed by a small fixed corpus.

Used for local development, demos and tests. Scoring is plain token
overlap so results are deterministic.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from knowledge_hub.question.lexicon import STOP_WORDS
from .base import DocumentationClient, DocumentationHit, ReadResponse, SearchResponse

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"[a-z0-9]+")


@dataclass(frozen=True)
class CorpusEntry:
    topic: str
    url: str
    title: str
    context: str


DEFAULT_CORPUS: tuple[CorpusEntry, ...] = (
    CorpusEntry(
        "general",
        "https://docs.aws.amazon.com/AmazonS3/latest/userguide/create-bucket-overview.html",
        "Creating a general purpose bucket - Amazon S3",
        "To upload your data to Amazon S3, you must first create an S3 bucket in one of the AWS Regions. "
        "Open the Amazon S3 console. Choose Create bucket. Enter a globally unique bucket name and choose a Region. "
        "Choose Create bucket to finish. You can also run `aws s3 mb s3://amzn-s3-demo-bucket` from the AWS CLI.",
    ),
    CorpusEntry(
        "general",
        "https://docs.aws.amazon.com/AmazonS3/latest/userguide/Versioning.html",
        "Retaining multiple versions of objects with S3 Versioning",
        "Versioning in Amazon S3 is a means of keeping multiple variants of an object in the same bucket. "
        "You can use S3 Versioning to preserve, retrieve, and restore every version of every object stored in your buckets. "
        "Versioning-enabled buckets can help you recover objects from accidental deletion or overwrite.",
    ),
    CorpusEntry(
        "reference_documentation",
        "https://docs.aws.amazon.com/AmazonS3/latest/userguide/manage-versioning-examples.html",
        "Enabling versioning on buckets - Amazon S3",
        "You can enable S3 Versioning on a new or existing bucket. Sign in to the AWS Management Console. "
        "Select the bucket and choose Properties. Under Bucket Versioning, choose Edit and then Enable. "
        "Using the AWS CLI: `aws s3api put-bucket-versioning --bucket amzn-s3-demo-bucket "
        "--versioning-configuration Status=Enabled`",
    ),
    CorpusEntry(
        "reference_documentation",
        "https://docs.aws.amazon.com/AmazonS3/latest/API/API_CreateBucket.html",
        "CreateBucket - Amazon Simple Storage Service API Reference",
        "Creates a new S3 bucket. To create a bucket, you must set up Amazon S3 and have a valid AWS Access Key ID "
        "to authenticate requests. Anonymous requests are never allowed to create buckets.",
    ),
    CorpusEntry(
        "general",
        "https://docs.aws.amazon.com/AmazonS3/latest/userguide/bucket-policies.html",
        "Bucket policies for Amazon S3",
        "A bucket policy is a resource-based policy that you can use to grant access permissions to your S3 bucket "
        "and the objects in it. Only the bucket owner can associate a policy with a bucket.",
    ),
    CorpusEntry(
        "troubleshooting",
        "https://docs.aws.amazon.com/lambda/latest/dg/troubleshooting-invocation.html",
        "Troubleshoot invocation issues in Lambda",
        "When a Lambda function times out, the invocation ends with a Task timed out error. "
        "Check the function timeout setting and increase it if the work needs more time. "
        "Review CloudWatch Logs for the function to find where the time is spent.",
    ),
    CorpusEntry(
        "troubleshooting",
        "https://repost.aws/knowledge-center/lambda-function-retry-timeout-sdk",
        "How do I troubleshoot retry and timeout issues when invoking a Lambda function using an AWS SDK?",
        "Timeout errors can occur when a Lambda function calls DynamoDB or another service and the SDK "
        "timeout is shorter than the request. Configure the SDK retry and timeout values for your workload.",
    ),
    CorpusEntry(
        "reference_documentation",
        "https://docs.aws.amazon.com/lambda/latest/dg/configuration-timeout.html",
        "Configure Lambda function timeout",
        "The default timeout for a Lambda function is 3 seconds and the maximum is 900 seconds. "
        "Set the timeout with `aws lambda update-function-configuration --function-name my-function --timeout 30`",
    ),
    CorpusEntry(
        "troubleshooting",
        "https://docs.aws.amazon.com/amazondynamodb/latest/developerguide/TroubleshootingLatency.html",
        "Troubleshooting latency issues in Amazon DynamoDB",
        "If your Lambda function reports timeout errors when calling DynamoDB, check for throttling with "
        "ProvisionedThroughputExceededException and review the table capacity mode.",
    ),
    CorpusEntry(
        "general",
        "https://docs.aws.amazon.com/amazondynamodb/latest/developerguide/Introduction.html",
        "What is Amazon DynamoDB?",
        "Amazon DynamoDB is a serverless, NoSQL, fully managed database with single-digit millisecond "
        "performance at any scale.",
    ),
    CorpusEntry(
        "general",
        "https://docs.aws.amazon.com/lambda/latest/dg/welcome.html",
        "What is AWS Lambda?",
        "You can use AWS Lambda to run code without provisioning or managing servers. "
        "Lambda runs your code on a high-availability compute infrastructure.",
    ),
    CorpusEntry(
        "general",
        "https://docs.aws.amazon.com/AWSEC2/latest/UserGuide/EC2_GetStarted.html",
        "Get started with Amazon EC2",
        "Launch an EC2 instance from the console. Choose an Amazon Machine Image and an instance type such as t3.micro. "
        "Select a key pair and a security group, then choose Launch instance.",
    ),
    CorpusEntry(
        "reference_documentation",
        "https://docs.aws.amazon.com/IAM/latest/UserGuide/access_policies.html",
        "Policies and permissions in IAM",
        "You manage access in AWS by creating policies and attaching them to IAM identities or AWS resources. "
        "A policy is an object that defines permissions when associated with an identity or resource.",
    ),
    CorpusEntry(
        "cloudformation",
        "https://docs.aws.amazon.com/AWSCloudFormation/latest/UserGuide/Welcome.html",
        "What is AWS CloudFormation?",
        "CloudFormation helps you model and set up AWS resources so that you spend less time managing them. "
        "Create a template that describes the resources you want, and CloudFormation provisions them as a stack.",
    ),
    CorpusEntry(
        "cdk_docs",
        "https://docs.aws.amazon.com/cdk/v2/guide/getting_started.html",
        "Getting started with the AWS CDK",
        "Install the AWS CDK CLI with `npm install -g aws-cdk`. Run `cdk init app --language typescript` "
        "to create a project, then deploy it with `cdk deploy`.",
    ),
    CorpusEntry(
        "cdk_constructs",
        "https://docs.aws.amazon.com/cdk/api/v2/docs/aws-cdk-lib.aws_s3.Bucket.html",
        "class Bucket (construct) - AWS CDK",
        "An S3 bucket with associated policy objects. Set `versioned: true` to enable versioning on the bucket.",
    ),
    CorpusEntry(
        "amplify_docs",
        "https://docs.amplify.aws/react/start/quickstart/",
        "Amplify quickstart",
        "Deploy a full-stack web app with AWS Amplify. Connect a repository and Amplify builds and hosts the app.",
    ),
    CorpusEntry(
        "current_awareness",
        "https://aws.amazon.com/about-aws/whats-new/2023/03/amazon-s3-security-best-practices-buckets-default/",
        "Amazon S3 now applies security best practices to new buckets by default",
        "New S3 buckets have S3 Block Public Access enabled and access control lists disabled by default.",
    ),
    CorpusEntry(
        "general",
        "https://docs.aws.amazon.com/vpc/latest/userguide/what-is-amazon-vpc.html",
        "What is Amazon VPC?",
        "With Amazon Virtual Private Cloud you can launch AWS resources in a logically isolated virtual network "
        "that you define, including subnets, route tables and gateways.",
    ),
    CorpusEntry(
        "reference_documentation",
        "https://docs.aws.amazon.com/apigateway/latest/developerguide/welcome.html",
        "What is Amazon API Gateway?",
        "API Gateway is a service for creating, publishing, maintaining, monitoring, and securing REST, HTTP, "
        "and WebSocket APIs at any scale.",
    ),
)


def _tokens(text: str) -> set[str]:
    return {token for token in _TOKEN.findall(text.lower()) if token not in STOP_WORDS}


class MockDocumentationConfig(BaseModel):
    """Configuration for the mock documentation client."""

    min_overlap: int = 1


class MockDocumentationClient(DocumentationClient):
    """Documentation client that searches an in-memory corpus."""

    def __init__(
        self,
        config: MockDocumentationConfig | None = None,
        corpus: tuple[CorpusEntry, ...] | list[CorpusEntry] | None = None,
        **kwargs: Any,
    ) -> None:
        self.config = config or MockDocumentationConfig(**kwargs)
        self.corpus = tuple(corpus) if corpus is not None else DEFAULT_CORPUS

    async def search_documentation(self, query: str, topics: list[str], limit: int = 10) -> SearchResponse:
        query_tokens = _tokens(query)
        scored = []
        for entry in self.corpus:
            if topics and entry.topic not in topics:
                continue
            overlap = len(query_tokens & _tokens(f"{entry.title} {entry.context}"))
            if overlap >= self.config.min_overlap:
                scored.append((overlap, entry))

        scored.sort(key=lambda item: (-item[0], item[1].url))
        hits = [
            DocumentationHit(
                rank_order=index,
                url=entry.url,
                title=entry.title,
                context=entry.context,
                topic=entry.topic,
            )
            for index, (_, entry) in enumerate(scored[:limit], start=1)
        ]
        logger.debug(f"Mock search for {topics} returned {len(hits)} hits")
        return SearchResponse(results=hits)

    async def read_documentation(self, url: str, max_length: int | None = None) -> ReadResponse:
        for entry in self.corpus:
            if entry.url == url:
                content = f"# {entry.title}\n\n{entry.context}"
                if max_length is not None and len(content) > max_length:
                    return ReadResponse(content=content[:max_length], truncated=True)
                return ReadResponse(content=content)
        return ReadResponse(content="")

    async def recommend(self, url: str) -> SearchResponse:
        source = next((entry for entry in self.corpus if entry.url == url), None)
        if source is None:
            return SearchResponse()
        related = [entry for entry in self.corpus if entry.topic == source.topic and entry.url != url]
        return SearchResponse(
            results=[
                DocumentationHit(rank_order=index, url=entry.url, title=entry.title, context=entry.context, topic=entry.topic)
                for index, entry in enumerate(related, start=1)
            ]
        )

    async def health_check(self) -> bool:
        return True
