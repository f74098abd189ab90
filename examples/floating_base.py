import mujoco
import mujoco.viewer
import numpy as np
from loop_rate_limiters import RateLimiter

import qpik

_XML = """
<mujoco model="floating">
  <compiler angle="radian"/>
  <option gravity="0 0 0"/>
  <worldbody>
    <light pos="0 0 3"/>
    <body name="torso" pos="0 0 1">
      <freejoint name="root"/>
      <geom type="box" size="0.15 0.1 0.05"/>
      <body name="left_arm" pos="0 0.1 0">
        <joint name="left_shoulder" type="hinge" axis="1 0 0" range="-1.5 1.5"/>
        <geom type="capsule" fromto="0 0 0 0 0.3 0" size="0.02"/>
        <site name="left_hand" pos="0 0.3 0"/>
      </body>
      <body name="right_arm" pos="0 -0.1 0">
        <joint name="right_shoulder" type="hinge" axis="1 0 0" range="-1.5 1.5"/>
        <geom type="capsule" fromto="0 0 0 0 -0.3 0" size="0.02"/>
        <site name="right_hand" pos="0 -0.3 0"/>
      </body>
    </body>
  </worldbody>
</mujoco>
"""

DT = 0.01


def main():
    model = mujoco.MjModel.from_xml_string(_XML)
    kin_dyn = qpik.KinDynComputations(model)

    variables = qpik.VariablesHandler()
    variables.add_variable("robot_velocity", kin_dyn.nv)

    # The torso pose is a hard constraint, the hands follow as well as they can.
    torso_task = qpik.SE3Task("torso", "body", kp_linear=5.0, kp_angular=5.0)
    left_task = qpik.R3Task("left_hand", "site", kp_linear=5.0)
    right_task = qpik.R3Task("right_hand", "site", kp_linear=5.0)
    limits_task = qpik.JointLimitsTask(dt=DT, gain=0.5)
    for task in (torso_task, left_task, right_task, limits_task):
        task.set_kin_dyn(kin_dyn)
        task.set_variables_handler(variables)
    damping_task = qpik.DampingTask(floating_base=True)
    damping_task.set_variables_handler(variables)

    torso_task.set_set_point_from_kin_dyn()
    left_task.set_set_point_from_kin_dyn()
    right_task.set_set_point_from_kin_dyn()

    ik = qpik.QPInverseKinematics()
    ik.initialize(
        qpik.StdParametersHandler(
            {
                "robot_velocity_variable_name": "robot_velocity",
                "floating_base": True,
                "damping": 1e-6,
            }
        )
    )
    ik.add_task(torso_task, "torso", priority=0)
    ik.add_task(limits_task, "joint_limits", priority=0)
    ik.add_task(left_task, "left_hand", priority=1, weight=np.ones(3))
    ik.add_task(right_task, "right_hand", priority=1, weight=np.ones(3))
    ik.add_task(damping_task, "damping", priority=1, weight=np.full(2, 1e-3))
    if not ik.finalize(variables):
        raise RuntimeError(f"Unable to finalize the IK: {ik.last_error}")

    left_start, _ = kin_dyn.get_frame_transform("left_hand", "site")
    right_start, _ = kin_dyn.get_frame_transform("right_hand", "site")

    with mujoco.viewer.launch_passive(
        model=model, data=kin_dyn.data, show_left_ui=False, show_right_ui=False
    ) as viewer:
        mujoco.mjv_defaultFreeCamera(model, viewer.cam)
        rate = RateLimiter(frequency=1.0 / DT, warn=False)
        t = 0.0
        while viewer.is_running():
            t += DT
            # Flap the hands up and down, the torso stays still.
            lift = np.array([0.0, 0.0, 0.15 * np.sin(2 * np.pi * 0.5 * t)])
            left_task.set_set_point(left_start + lift)
            right_task.set_set_point(right_start - lift)

            if ik.advance():
                kin_dyn.integrate_inplace(ik.get_output().robot_velocity, DT)
            else:
                print(f"IK failed: {ik.last_error}")

            viewer.sync()
            rate.sleep()


if __name__ == "__main__":
    main()
