# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import unittest

from models import prompts


class MakeSystemPromptTest(unittest.TestCase):

    def test_base_prompt_limits_topics_and_refuses_off_topic(self):
        prompt = prompts.make_system_prompt()

        self.assertEqual(prompt, prompts.INTERVIEW_COACH_SYSTEM_PROMPT)
        self.assertIn("STAR method", prompt)
        self.assertIn(prompts.OFF_TOPIC_REFUSAL, prompt)
        self.assertNotIn("User Context", prompt)
        self.assertNotIn("Training Context", prompt)

    def test_resume_context(self):
        prompt = prompts.make_system_prompt(resume_id="res-42")

        self.assertIn("(ID: res-42)", prompt)
        self.assertNotIn("Training Context", prompt)

    def test_training_context_follows_resume_context(self):
        prompt = prompts.make_system_prompt("res-42", "Software Engineering")

        self.assertIn("'Software Engineering'", prompt)
        self.assertLess(prompt.index("User Context"), prompt.index("Training Context"))


if __name__ == "__main__":
    unittest.main()
