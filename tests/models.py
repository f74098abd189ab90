"""MJCF models shared by the kinematics tests."""

import mujoco
import numpy as np

# Three link arm. The elbow has no limits.
ARM_XML = """
<mujoco model="arm">
  <compiler angle="radian"/>
  <worldbody>
    <body name="base">
      <joint name="yaw" type="hinge" axis="0 0 1" range="-3 3"/>
      <geom type="capsule" fromto="0 0 0 0 0 0.3" size="0.02"/>
      <body name="upper_arm" pos="0 0 0.3">
        <joint name="shoulder" type="hinge" axis="0 1 0" range="-2 2"/>
        <geom type="capsule" fromto="0 0 0 0.3 0 0" size="0.02"/>
        <body name="forearm" pos="0.3 0 0">
          <joint name="elbow" type="hinge" axis="0 1 0"/>
          <geom name="forearm" type="capsule" fromto="0 0 0 0.3 0 0" size="0.02"/>
          <site name="tip" pos="0.3 0 0"/>
        </body>
      </body>
    </body>
  </worldbody>
</mujoco>
"""

ARM_Q0 = (0.0, 0.3, -0.8)

# Free floating torso with a single hinge arm.
FLOATING_XML = """
<mujoco model="floating">
  <compiler angle="radian"/>
  <worldbody>
    <body name="torso" pos="0 0 1">
      <freejoint name="root"/>
      <geom type="box" size="0.1 0.1 0.1"/>
      <body name="arm" pos="0.1 0 0">
        <joint name="shoulder" type="hinge" axis="0 1 0" range="-1 1"/>
        <geom type="capsule" fromto="0 0 0 0.3 0 0" size="0.02"/>
        <site name="hand" pos="0.3 0 0"/>
      </body>
    </body>
  </worldbody>
</mujoco>
"""

BALL_XML = """
<mujoco model="ball">
  <worldbody>
    <body name="link">
      <joint name="ball" type="ball"/>
      <geom type="sphere" size="0.1"/>
    </body>
  </worldbody>
</mujoco>
"""


def load_arm() -> mujoco.MjModel:
    return mujoco.MjModel.from_xml_string(ARM_XML)


def load_floating() -> mujoco.MjModel:
    return mujoco.MjModel.from_xml_string(FLOATING_XML)


def random_floating_q(rng: np.random.Generator) -> np.ndarray:
    """Configuration of the floating model with a random base orientation."""
    quat = rng.normal(size=4)
    quat /= np.linalg.norm(quat)
    position = rng.uniform(-0.5, 0.5, size=3)
    return np.concatenate([position, quat, [rng.uniform(-0.8, 0.8)]])
