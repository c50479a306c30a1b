"""Complete end-to-end pipeline validation script."""

import asyncio
import logging

from knowledge_hub.config import get_settings
from knowledge_hub.pipeline import build_pipeline

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def validate_complete_pipeline():
    """Run sample questions through the question pipeline end to end."""
    settings = get_settings()
    print("🚀 Testing Complete Knowledge Hub Pipeline")
    print(f"   Documentation backend: {settings.docs_client.value}")
    print("=" * 50)

    pipeline = build_pipeline(settings)
    try:
        # Health check
        print("🔍 Performing health check...")
        healthy = await pipeline.search_service.client.health_check()
        print(f"   Documentation backend: {'✅' if healthy else '❌'}")
        print()

        if not healthy:
            print("❌ Health check failed, cannot proceed")
            print("Make sure the documentation gateway is running, or set DOCS_CLIENT=mock")
            return

        # Test normalization
        print("🧹 Testing question normalization...")
        for text in ["  how   do i use ddb with lamda ?? ", "cfn vs cdk for ec2"]:
            normalization = pipeline.normalize(text)
            print(f"   '{text}' → '{normalization.normalized}' ({len(normalization.changes)} changes)")
        print()

        print("🤖 Testing pipeline with sample questions...")
        test_questions = [
            "How do I create an S3 bucket with versioning?",
            "Lambda function timeout error with DynamoDB",
            "What is the difference between SQS vs SNS?",
            "asdkjhasd",
            "ab",
        ]

        session_id = await pipeline.create_session()
        for question in test_questions:
            print(f"\n📝 Question: '{question}'")
            result = await pipeline.process_question(question, session_id=session_id)

            print(f"   ⏱️  Processing time: {result.processing_time_ms:.0f}ms")
            if not result.success:
                print(f"   ❌ {result.error.code.value}: {result.error.message}")
                print(f"   💡 {result.error.suggestion}")
                continue

            analysis = result.analysis
            print(
                f"   🧭 Type: {analysis.question_type.value}, complexity: {analysis.complexity.value}, "
                f"services: {analysis.service_names or '-'}"
            )
            print(f"   🔍 Topics searched: {result.search.metadata.searched_topics}")

            answer = result.answer
            print(f"   🎯 Confidence: {answer.confidence:.0%}")
            print(f"   📚 Sources used: {len(answer.sources)}")
            for i, source in enumerate(answer.sources[:2], 1):
                print(f"      {i}. {source.title} ({source.score:.0%})")

            answer_preview = answer.text[:150].replace("\n", " ")
            if len(answer.text) > 150:
                answer_preview += "..."
            print(f"   💡 Answer: {answer_preview}")

        history = await pipeline.get_history(session_id)
        print("\n" + "=" * 50)
        print("🎉 Complete pipeline validation finished!")
        print(f"   Session {session_id} recorded {len(history)} answered questions")
        print(f"   Search cache: {pipeline.search_service.get_cache_stats()}")

    except Exception as e:
        print(f"❌ Pipeline test failed: {e}")
        import traceback
        traceback.print_exc()
    finally:
        await pipeline.close()


if __name__ == "__main__":
    asyncio.run(validate_complete_pipeline())
