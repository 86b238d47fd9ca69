import json
import unittest
from functools import partial
from unittest.mock import MagicMock, patch

from codepipeline_action import ActionConfig, create_action, create_job_validator
from codepipeline_action.errors import ActionConfigError, ArityError, ArtifactFormatError, MalformedJobError
from codepipeline_action.logging_helper import ActionLogger
from codepipeline_action.reporters import default_on_job_completion, default_on_job_failure

from fakes import FakeS3, artifact, job_description, unzip_entries, zip_bytes


class ActionTestCase(unittest.TestCase):
    def setUp(self):
        self.logger = ActionLogger(verbose=False)
        self.s3 = FakeS3({"in-key": zip_bytes(("input.json", '{"a": 1}'))})
        self.codepipeline = MagicMock()
        self.event = {
            "CodePipeline.job": job_description(
                inputs=[artifact("in", "in-key")],
                outputs=[artifact("out", "out-key")],
            )
        }

    def build(self, input_handler, **overrides):
        config = {
            "input_handler": input_handler,
            "job_validator": create_job_validator(1, 1, logger=self.logger, s3_client_factory=lambda _: self.s3),
            "on_job_completion": partial(default_on_job_completion, logger=self.logger, client=self.codepipeline),
            "on_job_failure": partial(default_on_job_failure, logger=self.logger, client=self.codepipeline),
            "logger": self.logger,
        }
        config.update(overrides)
        return create_action(config)


class TestEndToEnd(ActionTestCase):
    def test_success_stores_output_then_reports_once(self):
        seen = {}

        def handler(job, inputs):
            seen["inputs"] = inputs
            return job, [{"b": 2}]

        result = self.build(handler)(self.event, None)

        self.assertEqual(seen["inputs"], [{"a": 1}])
        self.assertEqual(len(self.s3.put_calls), 1)
        entries = unzip_entries(self.s3.put_calls[0]["Body"])
        self.assertEqual(len(entries), 1)
        self.assertEqual(json.loads(entries["output.json"]), {"b": 2})
        self.codepipeline.put_job_success_result.assert_called_once_with(jobId="job-1234")
        self.codepipeline.put_job_failure_result.assert_not_called()
        self.assertIs(result, self.codepipeline.put_job_success_result.return_value)

    def test_handler_error_is_reported_and_reraised(self):
        error = RuntimeError("boom")

        def handler(job, inputs):
            raise error

        with self.assertRaises(RuntimeError) as ctx:
            self.build(handler)(self.event, None)

        self.assertIs(ctx.exception, error)
        self.codepipeline.put_job_failure_result.assert_called_once_with(
            jobId="job-1234",
            failureDetails={"message": "boom", "type": "JobFailed"},
        )
        self.codepipeline.put_job_success_result.assert_not_called()
        self.assertEqual(self.s3.put_calls, [])

    def test_store_failure_reports_failure_not_success(self):
        error = RuntimeError("SlowDown")
        self.s3.put_errors["out-key"] = error

        with self.assertRaises(RuntimeError):
            self.build(lambda job, inputs: (job, [{"b": 2}]))(self.event, None)

        self.codepipeline.put_job_success_result.assert_not_called()
        details = self.codepipeline.put_job_failure_result.call_args.kwargs["failureDetails"]
        self.assertEqual(details, {"message": "SlowDown", "type": "JobFailed"})

    def test_validation_failure_is_reported(self):
        self.event["CodePipeline.job"]["data"]["outputArtifacts"] = []

        with self.assertRaises(MalformedJobError):
            self.build(lambda job, inputs: (job, []))(self.event, None)

        message = self.codepipeline.put_job_failure_result.call_args.kwargs["failureDetails"]["message"]
        self.assertIn("0 output artifact(s)", message)

    def test_handler_must_return_outputs_as_list(self):
        with self.assertRaises(ArityError):
            self.build(lambda job, inputs: (job, {"b": 2}))(self.event, None)
        self.codepipeline.put_job_failure_result.assert_called_once()
        self.assertEqual(self.s3.put_calls, [])

    def test_error_without_message_uses_repr(self):
        def handler(job, inputs):
            raise KeyError()

        with self.assertRaises(KeyError):
            self.build(handler)(self.event, None)
        details = self.codepipeline.put_job_failure_result.call_args.kwargs["failureDetails"]
        self.assertEqual(details["message"], "KeyError()")

    def test_failure_reporter_error_does_not_mask_original(self):
        self.codepipeline.put_job_failure_result.side_effect = RuntimeError("throttled")

        def handler(job, inputs):
            raise ValueError("boom")

        with self.assertRaisesRegex(ValueError, "boom"):
            self.build(handler)(self.event, None)

    def test_completion_failure_is_a_job_failure(self):
        self.codepipeline.put_job_success_result.side_effect = RuntimeError("InvalidJobState")

        with self.assertRaisesRegex(RuntimeError, "InvalidJobState"):
            self.build(lambda job, inputs: (job, [1]))(self.event, None)
        self.codepipeline.put_job_failure_result.assert_called_once()

    def test_missing_job_in_event(self):
        action = self.build(lambda job, inputs: (job, [1]))
        with self.assertRaisesRegex(MalformedJobError, "Event did not contain CodePipeline.job"):
            action({"Records": []}, None)
        self.codepipeline.put_job_failure_result.assert_not_called()

    def test_malformed_credentials_are_not_reported(self):
        secret_key = "wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY"
        session_token = "FQoGZXIvYXdzEXAMPLETOKEN"
        self.event["CodePipeline.job"]["data"]["artifactCredentials"] = {
            "secretAccessKey": secret_key,
            "sessionToken": session_token,
        }
        action = self.build(
            lambda job, inputs: (job, [1]),
            job_validator=create_job_validator(1, 1, logger=self.logger),
        )

        with self.assertRaises(MalformedJobError):
            action(self.event, None)

        message = self.codepipeline.put_job_failure_result.call_args.kwargs["failureDetails"]["message"]
        self.assertIn("accessKeyId", message)
        self.assertNotIn(secret_key[:4], message)
        self.assertNotIn(session_token[-8:], message)

    def test_empty_job_reaches_the_validator(self):
        with self.assertRaisesRegex(MalformedJobError, "^CodePipeline job contained no data$"):
            self.build(lambda job, inputs: (job, [1]))({"CodePipeline.job": {}}, None)
        self.codepipeline.put_job_failure_result.assert_called_once()

    def test_non_finite_output_is_a_job_failure(self):
        with self.assertRaises(ArtifactFormatError):
            self.build(lambda job, inputs: (job, [{"x": float("inf")}]))(self.event, None)

        self.assertEqual(self.s3.put_calls, [])
        self.codepipeline.put_job_success_result.assert_not_called()
        details = self.codepipeline.put_job_failure_result.call_args.kwargs["failureDetails"]
        self.assertEqual(details["message"], "Failed to serialize output artifact #1 (out) as JSON")

    def test_action_is_reusable_across_invocations(self):
        action = self.build(lambda job, inputs: (job, [inputs[0]["a"]]))
        action(self.event, None)
        action(self.event, None)
        self.assertEqual(self.codepipeline.put_job_success_result.call_count, 2)
        self.assertEqual(len(self.s3.put_calls), 2)


class TestStageOverrides(ActionTestCase):
    def test_every_stage_can_be_replaced(self):
        calls = []

        def validator(job):
            calls.append("validate")
            return {"validated": job["id"]}

        def input_adapter(job):
            calls.append("input")
            return job, ["x"]

        def handler(job, inputs):
            calls.append(("handler", inputs))
            return job, ["y"]

        def output_adapter(job, outputs):
            calls.append(("output", outputs))
            return job, ["ack"]

        def on_completion(job):
            calls.append(("complete", job))
            return "done"

        action = self.build(
            handler,
            job_validator=validator,
            input_adapter=input_adapter,
            output_adapter=output_adapter,
            on_job_completion=on_completion,
        )

        self.assertEqual(action(self.event, None), "done")
        self.assertEqual(
            calls,
            ["validate", "input", ("handler", ["x"]), ("output", ["y"]), ("complete", {"validated": "job-1234"})],
        )

    def test_custom_failure_reporter_gets_original_job(self):
        on_failure = MagicMock()
        error = RuntimeError("bad")

        def input_adapter(job):
            raise error

        action = self.build(lambda job, inputs: (job, []), input_adapter=input_adapter, on_job_failure=on_failure)
        with self.assertRaises(RuntimeError):
            action(self.event, None)

        on_failure.assert_called_once_with(self.event["CodePipeline.job"], error)


class TestCreateAction(unittest.TestCase):
    def test_bare_handler_gets_defaults(self):
        action = create_action(lambda job, inputs: (job, inputs), verbose=False)
        self.assertTrue(callable(action))

    def test_config_without_handler(self):
        with self.assertRaisesRegex(ActionConfigError, "No input handler specified when creating action"):
            create_action({"num_input_artifacts": 2})

    def test_action_config_without_handler(self):
        with self.assertRaisesRegex(ActionConfigError, "No input handler"):
            create_action(ActionConfig(num_output_artifacts=0))

    def test_unknown_option(self):
        with self.assertRaises(ActionConfigError):
            create_action({"input_handler": print, "num_inputs": 2})

    def test_rejects_non_callable(self):
        with self.assertRaises(ActionConfigError):
            create_action(42)

    def test_camel_case_options(self):
        s3 = FakeS3({
            "k1": zip_bytes(("a.json", "1")),
            "k2": zip_bytes(("b.json", "2")),
        })
        codepipeline = MagicMock()
        job = job_description(inputs=[artifact("a", "k1"), artifact("b", "k2")], outputs=[])

        with patch("codepipeline_action.reporters.codepipeline_client", return_value=codepipeline), patch(
            "codepipeline_action.config.create_job_validator",
            side_effect=lambda n_in, n_out, logger: create_job_validator(
                n_in, n_out, logger=logger, s3_client_factory=lambda _: s3
            ),
        ):
            action = create_action({
                "inputHandler": lambda job, inputs: (job, []) if inputs == [1, 2] else None,
                "numInputArtifacts": 2,
                "numOutputArtifacts": 0,
                "verbose": False,
            })
            action({"CodePipeline.job": job}, None)

        codepipeline.put_job_success_result.assert_called_once_with(jobId="job-1234")


if __name__ == "__main__":
    unittest.main()
