import mujoco
import mujoco.viewer
import numpy as np
from loop_rate_limiters import RateLimiter

import qpik

_XML = """
<mujoco model="arm">
  <compiler angle="radian"/>
  <worldbody>
    <light pos="0 0 2"/>
    <geom type="plane" size="1 1 0.01" rgba="0.8 0.8 0.8 1"/>
    <body name="base">
      <joint name="yaw" type="hinge" axis="0 0 1" range="-3 3"/>
      <geom type="capsule" fromto="0 0 0 0 0 0.3" size="0.03"/>
      <body name="upper_arm" pos="0 0 0.3">
        <joint name="shoulder" type="hinge" axis="0 1 0" range="-2 2"/>
        <geom type="capsule" fromto="0 0 0 0.3 0 0" size="0.025"/>
        <body name="forearm" pos="0.3 0 0">
          <joint name="elbow" type="hinge" axis="0 1 0" range="-2.5 2.5"/>
          <geom type="capsule" fromto="0 0 0 0.25 0 0" size="0.02"/>
          <body name="hand" pos="0.25 0 0">
            <joint name="wrist" type="hinge" axis="0 1 0" range="-1.5 1.5"/>
            <geom type="box" size="0.03 0.02 0.01" pos="0.03 0 0"/>
            <site name="tool" pos="0.06 0 0"/>
          </body>
        </body>
      </body>
    </body>
    <body name="target" mocap="true" pos="0.4 0 0.3">
      <geom type="sphere" size="0.02" contype="0" conaffinity="0" rgba="1 0 0 0.5"/>
    </body>
  </worldbody>
</mujoco>
"""

# IK parameters
DT = 0.005
Q0 = np.array([0.0, 0.3, -0.8, 0.2])


def main():
    model = mujoco.MjModel.from_xml_string(_XML)
    kin_dyn = qpik.KinDynComputations(model, q=Q0)

    variables = qpik.VariablesHandler()
    variables.add_variable("robot_velocity", kin_dyn.nv)

    # Define tasks
    tool_task = qpik.R3Task("tool", "site", kp_linear=20.0)
    posture_task = qpik.JointTrackingTask(kp=2.0)
    limits_task = qpik.JointLimitsTask(dt=DT, gain=0.5)
    for task in (tool_task, posture_task, limits_task):
        task.set_kin_dyn(kin_dyn)
        task.set_variables_handler(variables)
    posture_task.set_set_point(Q0)

    # Fade the posture bias in.
    posture_weight = qpik.TimeVaryingWeightProvider(np.zeros(kin_dyn.nv), dt=DT)
    posture_weight.set_transition(np.full(kin_dyn.nv, 1e-2), duration=1.0)

    ik = qpik.QPInverseKinematics()
    ik.initialize(
        qpik.StdParametersHandler(
            {"robot_velocity_variable_name": "robot_velocity", "verbosity": False}
        )
    )
    ik.add_task(limits_task, "joint_limits", priority=0)
    ik.add_task(tool_task, "tool", priority=1, weight=np.full(3, 10.0))
    ik.add_task(posture_task, "posture", priority=1, weight=posture_weight)
    if not ik.finalize(variables):
        raise RuntimeError(f"Unable to finalize the IK: {ik.last_error}")
    print(ik)

    data = kin_dyn.data
    with mujoco.viewer.launch_passive(
        model=model, data=data, show_left_ui=False, show_right_ui=False
    ) as viewer:
        mujoco.mjv_defaultFreeCamera(model, viewer.cam)

        initial_target_position = data.mocap_pos[0].copy()
        amp = 0.1
        freq = 0.3
        local_time = 0.0
        rate = RateLimiter(frequency=1.0 / DT, warn=False)

        while viewer.is_running():
            local_time += DT

            # Circular offset
            offset = np.array(
                [
                    0.0,
                    amp * np.cos(2 * np.pi * freq * local_time),
                    amp * np.sin(2 * np.pi * freq * local_time),
                ]
            )
            data.mocap_pos[0] = initial_target_position + offset
            tool_task.set_set_point(data.mocap_pos[0])

            posture_weight.advance()
            if ik.advance():
                kin_dyn.integrate_inplace(ik.get_output().robot_velocity, DT)

            # Visualize at fixed FPS
            viewer.sync()
            rate.sleep()


if __name__ == "__main__":
    main()
